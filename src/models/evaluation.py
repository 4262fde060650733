"""
evaluation.py

Compares the final test-set metrics of every tuned model family, selects the
model with the lowest test RMSE and refits it on all labeled rows.

Output:
- outputs/logs/model_comparison.csv
"""

import logging
from pathlib import Path

import pandas as pd
from sklearn.base import clone
from sklearn.pipeline import Pipeline

from src import config
from src.models.model_families import ModelFamily
from src.models.train_model import FinalFit
from src.preprocessing.splitter import DataSplit


class ModelEvaluator:
    def __init__(self, project_root: Path):
        self.project_root = project_root
        self.logs_dir = project_root / config.LOGS_SUBDIR

    @staticmethod
    def _order(fits: list) -> list:
        family_rank = {family: i for i, family in enumerate(ModelFamily)}
        return sorted(fits, key=lambda f: (f.rmse, family_rank[f.family]))

    def tabulate(self, fits: list) -> pd.DataFrame:
        """Test metrics of every final fit, best (lowest RMSE) first."""
        if not fits:
            raise ValueError("No fitted models to compare")
        table = pd.DataFrame([{
            'model': fit.family.value,
            'recipe': fit.variant.value,
            'params': fit.params,
            'rmse': fit.rmse,
            'mae': fit.mae,
        } for fit in self._order(fits)])
        logging.info(f"\nModel comparison (test set):\n{table[['model', 'recipe', 'rmse', 'mae']]}")
        return table

    def select_best(self, fits: list) -> FinalFit:
        """Model with the minimum test RMSE; ties go to the earlier family."""
        if not fits:
            raise ValueError("No fitted models to compare")
        best = self._order(fits)[0]
        logging.info(f"Best model: {best.family.label} (test RMSE {best.rmse:.2f}, "
                     f"MAE {best.mae:.2f})")
        return best

    def refit_on_all(self, best: FinalFit, split: DataSplit) -> Pipeline:
        """
        Refit the selected pipeline on train + test rows.

        The hyperparameters chosen by the training-only search are kept as is.

        Args:
            best: Selected final fit
            split: Train/test partition whose union is the full labeled set

        Returns:
            Pipeline: Production model fit on every labeled row
        """
        try:
            full = split.full
            X = full.drop(columns=[config.TARGET])
            y = full[config.TARGET]
            final_model = clone(best.pipeline)
            final_model.fit(X, y)
            logging.info(f"Refit {best.family.label} on all {len(full)} labeled rows")
            return final_model
        except Exception as e:
            logging.error(f"Error refitting final model: {str(e)}")
            raise

    def save_metrics(self, table: pd.DataFrame) -> Path:
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.logs_dir / 'model_comparison.csv'
        table.to_csv(output_path, index=False)
        logging.info(f"Saved: {output_path}")
        return output_path
