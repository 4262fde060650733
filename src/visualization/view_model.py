"""
view_model.py

Exploratory plots of the daily bike-rental table and plots of the model
comparison results. Figures are written to outputs/figures/.
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from src import config
from src.models.train_model import FinalFit, TuningResult
from src.preprocessing.splitter import DataSplit


class ModelVisualizer:
    def __init__(self, project_root: Path):
        """Initialize the ModelVisualizer."""
        self.project_root = project_root
        self.figures_dir = project_root / config.FIGURES_SUBDIR
        self.figures_dir.mkdir(parents=True, exist_ok=True)

    def _save(self, name: str) -> Path:
        path = self.figures_dir / name
        plt.tight_layout()
        plt.savefig(path)
        plt.close()
        logging.info(f"Saved figure: {path}")
        return path

    def plot_daily_rentals(self, daily: pd.DataFrame) -> Path:
        """Daily rented bike count over the year, colored by season."""
        plt.figure(figsize=(14, 6))
        for season, group in daily.groupby(config.SEASON_COL):
            plt.scatter(group[config.DATE_COL], group[config.TARGET], s=12, label=season)
        plt.title('Daily Rented Bike Count')
        plt.xlabel('Date')
        plt.ylabel('Rented bikes per day')
        plt.legend()
        plt.grid(True)
        return self._save('daily_rentals.png')

    def plot_rentals_vs_temperature(self, daily: pd.DataFrame) -> Path:
        """Rentals against mean daily temperature, holidays highlighted."""
        plt.figure(figsize=(10, 8))
        for holiday, group in daily.groupby(config.HOLIDAY_COL):
            plt.scatter(group['temperature'], group[config.TARGET], alpha=0.6, label=holiday)
        plt.title('Daily Rentals vs Mean Temperature')
        plt.xlabel('Mean temperature (°C)')
        plt.ylabel('Rented bikes per day')
        plt.legend()
        return self._save('rentals_vs_temperature.png')

    def plot_correlation_heatmap(self, daily: pd.DataFrame) -> Path:
        corr = daily.select_dtypes(include='number').corr()
        plt.figure(figsize=(10, 8))
        plt.imshow(corr.values, cmap='coolwarm', vmin=-1, vmax=1)
        plt.colorbar(label='Pearson correlation')
        plt.xticks(range(len(corr.columns)), corr.columns, rotation=45, ha='right')
        plt.yticks(range(len(corr.columns)), corr.columns)
        for i in range(len(corr.columns)):
            for j in range(len(corr.columns)):
                plt.text(j, i, f'{corr.values[i, j]:.2f}', ha='center', va='center', fontsize=7)
        plt.title('Correlation of Daily Numeric Variables')
        return self._save('correlation_heatmap.png')

    def plot_tuning_results(self, tuning: TuningResult) -> Path:
        """Mean CV RMSE with standard-error bars for every grid candidate."""
        table = tuning.table[~tuning.table['failed']]
        plt.figure(figsize=(12, 6))
        plt.errorbar(table['candidate'], table['mean_rmse'], yerr=table['std_err_rmse'],
                     fmt='o', capsize=3)
        plt.axvline(tuning.best_candidate, color='r', linestyle='--', label='Selected')
        plt.title(f'Cross-validated RMSE - {tuning.family.label} ({tuning.variant.value} recipe)')
        plt.xlabel('Candidate')
        plt.ylabel('Mean CV RMSE')
        plt.legend()
        plt.grid(True)
        return self._save(f'tuning_{tuning.family.value}.png')

    def plot_model_comparison(self, table: pd.DataFrame) -> Path:
        x = np.arange(len(table))
        width = 0.4
        plt.figure(figsize=(12, 6))
        plt.bar(x - width / 2, table['rmse'], width, label='RMSE')
        plt.bar(x + width / 2, table['mae'], width, label='MAE')
        plt.xticks(x, table['model'], rotation=45)
        plt.title('Test-set Error by Model')
        plt.ylabel('Rented bikes per day')
        plt.legend()
        plt.grid(True, axis='y')
        return self._save('model_comparison.png')

    def plot_predicted_vs_actual(self, fit: FinalFit, split: DataSplit) -> Path:
        actual = split.test.loc[fit.predictions.index, config.TARGET]
        plt.figure(figsize=(10, 8))
        plt.scatter(actual, fit.predictions, alpha=0.6)
        lims = [min(actual.min(), fit.predictions.min()), max(actual.max(), fit.predictions.max())]
        plt.plot(lims, lims, 'r--', lw=2)
        plt.xlabel('Actual rentals')
        plt.ylabel('Predicted rentals')
        plt.title(f'Actual vs Predicted - {fit.family.label}')
        return self._save(f'predicted_vs_actual_{fit.family.value}.png')

    def generate_exploratory_plots(self, daily: pd.DataFrame) -> list:
        try:
            logging.info("Generating exploratory plots")
            return [
                self.plot_daily_rentals(daily),
                self.plot_rentals_vs_temperature(daily),
                self.plot_correlation_heatmap(daily),
            ]
        except Exception as e:
            logging.error(f"Error generating exploratory plots: {str(e)}")
            raise
