"""
splitter.py

Reproducible resampling of the daily table:
- Stratified train/test partition
- k-fold cross-validation assignment of the training partition
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, StratifiedKFold, train_test_split

from src import config


@dataclass(frozen=True)
class DataSplit:
    """Disjoint train/test partition of the daily table."""
    train: pd.DataFrame
    test: pd.DataFrame
    strata: Optional[str]
    seed: int

    @property
    def full(self) -> pd.DataFrame:
        return pd.concat([self.train, self.test]).sort_index()


@dataclass(frozen=True)
class FoldAssignment:
    """Cross-validation folds as (train positions, validation positions) pairs."""
    folds: tuple
    seed: int

    @property
    def k(self) -> int:
        return len(self.folds)

    def validation_fold_of(self, n_rows: int) -> np.ndarray:
        """Fold number of every training row (-1 if never validated)."""
        labels = np.full(n_rows, -1)
        for i, (_, val_idx) in enumerate(self.folds):
            labels[val_idx] = i
        return labels


class DataSplitter:
    def __init__(self, seed: int = config.RANDOM_SEED):
        self.seed = seed

    def split(self, df: pd.DataFrame, strata: Optional[str] = config.SEASON_COL,
              prop: float = config.TRAIN_PROP) -> DataSplit:
        """
        Randomly partition rows into train and test sets.

        Args:
            df: Daily table
            strata: Column whose class proportions are preserved (None = plain random)
            prop: Fraction of rows assigned to the training set

        Returns:
            DataSplit: Train and test frames keeping the original index
        """
        if not 0 < prop < 1:
            raise ValueError(f"prop must be in (0, 1), got {prop}")
        if strata is not None and strata not in df.columns:
            raise ValueError(f"Stratification column '{strata}' not found")

        try:
            train, test = train_test_split(
                df,
                train_size=prop,
                random_state=self.seed,
                shuffle=True,
                stratify=df[strata] if strata is not None else None,
            )
        except ValueError as e:
            logging.error(f"Error splitting data: {str(e)}")
            raise ValueError(f"Cannot split {len(df)} rows with prop={prop}: {str(e)}") from e

        logging.info(f"Training set: {len(train)} rows, test set: {len(test)} rows")
        return DataSplit(train=train, test=test, strata=strata, seed=self.seed)

    def folds(self, train: pd.DataFrame, k: int = config.CV_FOLDS,
              strata: Optional[str] = None) -> FoldAssignment:
        """Partition the training rows into k validation folds."""
        if k < 2:
            raise ValueError(f"k must be at least 2, got {k}")
        if k > len(train):
            raise ValueError(f"k={k} exceeds the number of training rows ({len(train)})")

        if strata is None:
            splitter = KFold(n_splits=k, shuffle=True, random_state=self.seed)
            pairs = splitter.split(train)
        else:
            splitter = StratifiedKFold(n_splits=k, shuffle=True, random_state=self.seed)
            pairs = splitter.split(train, train[strata])

        folds = tuple((train_idx, val_idx) for train_idx, val_idx in pairs)
        logging.info(f"Created {k} cross-validation folds "
                     f"(validation sizes: {[len(v) for _, v in folds]})")
        return FoldAssignment(folds=folds, seed=self.seed)
