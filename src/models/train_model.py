"""
train_model.py

Tunes and fits the five regression families on the daily bike-rental table:
1. Cross-validated grid search (RMSE and MAE per fold) over each family's grid
2. Best configuration = lowest mean CV RMSE
3. Refit of the winner on the full training set and a single test evaluation

Failed candidates (e.g. an invalid regularization strength) are recorded and
excluded from selection instead of aborting the search.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.model_selection import GridSearchCV
from sklearn.pipeline import Pipeline

from src import config
from src.models.metrics import regression_metrics
from src.models.model_families import ModelFamily
from src.preprocessing.feature_engineering import RecipeVariant, build_recipe
from src.preprocessing.splitter import DataSplit, FoldAssignment


def setup_logging(logs_dir: Path):
    """Configure logging to console and a timestamped file."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"training_{pd.Timestamp.now().strftime('%Y%m%d_%H%M%S')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


class ModelTrainingError(RuntimeError):
    """Raised when no configuration of a model family can be fit."""


@dataclass(frozen=True)
class TuningResult:
    family: ModelFamily
    variant: RecipeVariant
    # One row per candidate: params, mean/std-err RMSE and MAE, failed flag
    table: pd.DataFrame
    best_candidate: int
    best_params: dict
    best_rmse: float
    best_mae: float

    @property
    def n_failed(self) -> int:
        return int(self.table['failed'].sum())


@dataclass(frozen=True)
class FinalFit:
    family: ModelFamily
    variant: RecipeVariant
    params: dict
    pipeline: Pipeline = field(repr=False)
    rmse: float
    mae: float
    predictions: pd.Series = field(repr=False)


class ModelTrainer:
    scoring = {
        'rmse': 'neg_root_mean_squared_error',
        'mae': 'neg_mean_absolute_error',
    }

    def __init__(self, project_root: Path, seed: int = config.RANDOM_SEED,
                 param_grids: Optional[dict] = None, n_jobs=config.N_JOBS):
        """
        Initialize the ModelTrainer.

        Args:
            project_root: Root directory of the project
            seed: Random state handed to every stochastic estimator
            param_grids: Optional {ModelFamily: grid} overriding the family defaults
            n_jobs: Parallel jobs for the grid search
        """
        self.project_root = project_root
        self.logs_dir = project_root / config.LOGS_SUBDIR
        self.seed = seed
        self.param_grids = param_grids or {}
        self.n_jobs = n_jobs

    @staticmethod
    def split_xy(df: pd.DataFrame):
        return df.drop(columns=[config.TARGET]), df[config.TARGET]

    def make_pipeline(self, family: ModelFamily, variant) -> Pipeline:
        return Pipeline([
            ('recipe', build_recipe(variant)),
            ('model', family.build_estimator(self.seed)),
        ])

    def grid_for(self, family: ModelFamily) -> dict:
        return self.param_grids.get(family, family.param_grid())

    def _candidate_table(self, cv_results: dict, k: int) -> pd.DataFrame:
        rows = []
        for i, params in enumerate(cv_results['params']):
            rmse = np.array([-cv_results[f'split{j}_test_rmse'][i] for j in range(k)], dtype=float)
            mae = np.array([-cv_results[f'split{j}_test_mae'][i] for j in range(k)], dtype=float)
            failed = not (np.isfinite(rmse).all() and np.isfinite(mae).all())
            rows.append({
                'candidate': i,
                'params': params,
                'mean_rmse': np.nan if failed else rmse.mean(),
                'std_err_rmse': np.nan if failed else rmse.std(ddof=1) / np.sqrt(k),
                'mean_mae': np.nan if failed else mae.mean(),
                'std_err_mae': np.nan if failed else mae.std(ddof=1) / np.sqrt(k),
                'failed': failed,
            })
        return pd.DataFrame(rows)

    def tune(self, family: ModelFamily, variant, split: DataSplit,
             folds: FoldAssignment) -> TuningResult:
        """
        Cross-validated grid search for one family under one recipe.

        Candidates are visited in scikit-learn ParameterGrid order; among
        candidates with equal mean RMSE the earliest one wins.
        """
        variant = RecipeVariant(variant)
        logging.info(f"Tuning {family.label} with the {variant.value} recipe")

        X_train, y_train = self.split_xy(split.train)
        search = GridSearchCV(
            self.make_pipeline(family, variant),
            param_grid=self.grid_for(family),
            scoring=self.scoring,
            refit=False,
            cv=list(folds.folds),
            error_score=np.nan,
            n_jobs=self.n_jobs,
        )

        try:
            search.fit(X_train, y_train)
        except ValueError as e:
            # scikit-learn raises once every fit of the search has failed
            logging.error(f"Error tuning {family.label}: {str(e)}")
            raise ModelTrainingError(f"No configuration of {family.label} could be fit") from e

        table = self._candidate_table(search.cv_results_, folds.k)
        failed = table[table['failed']]
        for _, row in failed.iterrows():
            logging.warning(f"{family.label}: candidate {row['params']} failed and is excluded")

        valid = table[~table['failed']]
        if valid.empty:
            raise ModelTrainingError(f"No configuration of {family.label} could be fit")

        best = valid.sort_values('mean_rmse', kind='stable').iloc[0]
        logging.info(f"{family.label}: best params {best['params']} "
                     f"(CV RMSE {best['mean_rmse']:.2f} ± {best['std_err_rmse']:.2f}, "
                     f"{len(failed)} failed of {len(table)})")

        return TuningResult(
            family=family,
            variant=variant,
            table=table,
            best_candidate=int(best['candidate']),
            best_params=dict(best['params']),
            best_rmse=float(best['mean_rmse']),
            best_mae=float(best['mean_mae']),
        )

    def fit_final(self, tuning: TuningResult, split: DataSplit) -> FinalFit:
        """Refit the tuned configuration on the whole training set and score it once on test."""
        try:
            pipeline = self.make_pipeline(tuning.family, tuning.variant)
            pipeline.set_params(**tuning.best_params)

            X_train, y_train = self.split_xy(split.train)
            X_test, y_test = self.split_xy(split.test)
            pipeline.fit(X_train, y_train)

            predictions = pd.Series(pipeline.predict(X_test), index=X_test.index, name='prediction')
            metrics = regression_metrics(y_test, predictions)
            logging.info(f"{tuning.family.label}: test RMSE {metrics['rmse']:.2f}, "
                         f"test MAE {metrics['mae']:.2f}")

            return FinalFit(
                family=tuning.family,
                variant=tuning.variant,
                params=tuning.best_params,
                pipeline=pipeline,
                rmse=metrics['rmse'],
                mae=metrics['mae'],
                predictions=predictions,
            )

        except Exception as e:
            logging.error(f"Error fitting final {tuning.family.label} model: {str(e)}")
            raise

    def compare_recipes(self, family: ModelFamily, split: DataSplit,
                        folds: FoldAssignment):
        """
        Best cross-validated RMSE/MAE of one family under each recipe variant.

        Returns:
            tuple: (comparison DataFrame sorted by mean RMSE, {RecipeVariant: TuningResult})
        """
        rows = []
        results = {}
        for variant in RecipeVariant:
            result = self.tune(family, variant, split, folds)
            results[variant] = result
            rows.append({
                'recipe': variant.value,
                'mean_rmse': result.best_rmse,
                'std_err_rmse': result.table.loc[result.best_candidate, 'std_err_rmse'],
                'mean_mae': result.best_mae,
                'params': result.best_params,
            })
        comparison = pd.DataFrame(rows).sort_values('mean_rmse', kind='stable').reset_index(drop=True)
        logging.info(f"\nRecipe comparison for {family.label}:\n{comparison}")
        return comparison, results

    def train_all(self, split: DataSplit, folds: FoldAssignment,
                  recipes: Optional[dict] = None, tuned: Optional[dict] = None):
        """
        Tune and refit every model family.

        Args:
            split: Train/test partition
            folds: Cross-validation folds of the training partition
            recipes: Optional {ModelFamily: RecipeVariant} overriding each family's default
            tuned: Optional {ModelFamily: TuningResult} already computed; these families are not re-tuned

        Returns:
            tuple: ({ModelFamily: TuningResult}, [FinalFit, ...])
        """
        recipes = recipes or {}
        tuned = tuned or {}
        tunings = {}
        fits = []
        for family in ModelFamily:
            if family in tuned:
                tunings[family] = tuned[family]
                fits.append(self.fit_final(tuned[family], split))
                continue
            variant = recipes.get(family, family.default_recipe)
            try:
                tuning = self.tune(family, variant, split, folds)
            except ModelTrainingError as e:
                logging.error(f"Skipping {family.label}: {str(e)}")
                continue
            tunings[family] = tuning
            fits.append(self.fit_final(tuning, split))

        if not fits:
            raise ModelTrainingError("No model family could be fit")
        return tunings, fits
