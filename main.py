"""
Main pipeline for the Seoul bike-rental demand project.

This script orchestrates the entire analysis, from fetching the hourly data
to selecting and refitting the best regression model on daily aggregates.
"""

import logging
from pathlib import Path

import pandas as pd

from src import config
from src.models.evaluation import ModelEvaluator
from src.models.model_families import ModelFamily
from src.models.train_model import ModelTrainer, setup_logging
from src.preprocessing.data_loader import BikeDataLoader
from src.preprocessing.feature_engineering import RecipeVariant
from src.preprocessing.splitter import DataSplitter
from src.preprocessing.time_aggregation import DailyAggregator
from src.visualization.view_model import ModelVisualizer


def run_preprocessing_pipeline(project_root: Path) -> pd.DataFrame:
    """Load the hourly data and reduce it to the daily table."""
    # 1. Load hourly observations
    hourly = BikeDataLoader(project_root).load()

    # 2. Aggregate to days
    aggregator = DailyAggregator(project_root)
    daily = aggregator.aggregate(hourly)
    aggregator.save(daily)
    return daily


def run_modeling_pipeline(daily: pd.DataFrame, project_root: Path,
                          param_grids=None, k: int = config.CV_FOLDS,
                          make_plots: bool = True) -> dict:
    """
    Split, tune, compare and refit every model family.

    Returns:
        dict: split, folds, tunings, fits, comparison table, best fit and final model
    """
    # 1. Resample
    splitter = DataSplitter(config.RANDOM_SEED)
    split = splitter.split(daily, strata=config.SEASON_COL, prop=config.TRAIN_PROP)
    folds = splitter.folds(split.train, k=k)

    # 2. Pick the linear recipe, then tune and fit every family
    trainer = ModelTrainer(project_root, param_grids=param_grids)
    recipe_comparison, linear_tunings = trainer.compare_recipes(ModelFamily.LINEAR, split, folds)
    best_recipe = RecipeVariant(recipe_comparison.loc[0, 'recipe'])
    tunings, fits = trainer.train_all(
        split, folds, tuned={ModelFamily.LINEAR: linear_tunings[best_recipe]}
    )

    # 3. Compare on the test set and refit the winner on all rows
    evaluator = ModelEvaluator(project_root)
    table = evaluator.tabulate(fits)
    evaluator.save_metrics(table)
    best = evaluator.select_best(fits)
    final_model = evaluator.refit_on_all(best, split)

    if make_plots:
        visualizer = ModelVisualizer(project_root)
        visualizer.generate_exploratory_plots(daily)
        for tuning in tunings.values():
            visualizer.plot_tuning_results(tuning)
        visualizer.plot_model_comparison(table)
        visualizer.plot_predicted_vs_actual(best, split)

    return {
        'split': split,
        'folds': folds,
        'recipe_comparison': recipe_comparison,
        'tunings': tunings,
        'fits': fits,
        'comparison': table,
        'best': best,
        'final_model': final_model,
    }


def main():
    """Main function to execute the complete pipeline."""
    project_root = config.PROJECT_ROOT
    setup_logging(project_root / config.LOGS_SUBDIR)
    try:
        logging.info("Starting preprocessing pipeline...")
        daily = run_preprocessing_pipeline(project_root)

        logging.info("Starting modeling pipeline...")
        results = run_modeling_pipeline(daily, project_root)

        logging.info(f"Pipeline completed successfully! Final model: "
                     f"{results['best'].family.label}")

    except Exception as e:
        logging.error(f"Error in pipeline execution: {str(e)}")
        raise


if __name__ == "__main__":
    main()
