"""
feature_engineering.py

Feature recipes for the daily bike-rental table. Each recipe is an unfitted
scikit-learn Pipeline that learns its statistics from the rows passed to
``fit`` and applies them unchanged to any other rows.

Variants:
- basic: weekday/weekend indicator, drop date, z-score numeric, dummy-encode categorical
- interactions: basic + season x holiday, season x temperature, temperature x rainfall
- polynomial: interactions + squared term for every numeric predictor
"""

import logging
from enum import Enum

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.compose import ColumnTransformer, make_column_selector
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from src import config


class RecipeVariant(Enum):
    BASIC = 'basic'
    INTERACTIONS = 'interactions'
    POLYNOMIAL = 'polynomial'


class DayTypeAdder(BaseEstimator, TransformerMixin):
    """Add a categorical ``day_type`` column (weekday/weekend) derived from a date column."""

    def __init__(self, date_col: str = config.DATE_COL):
        self.date_col = date_col

    def fit(self, X: pd.DataFrame, y=None):
        if self.date_col not in X.columns:
            raise KeyError(f"Column '{self.date_col}' not found in DataFrame.")
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        df = X.copy()
        weekend = pd.to_datetime(df[self.date_col]).dt.dayofweek >= 5
        df['day_type'] = np.where(weekend, 'weekend', 'weekday')
        return df


class ColumnDropper(BaseEstimator, TransformerMixin):
    """Remove columns that must not reach the model (ignored when absent)."""

    def __init__(self, columns=tuple(config.RECIPE_DROP_COLUMNS)):
        self.columns = columns

    def fit(self, X: pd.DataFrame, y=None):
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        return X.drop(columns=[c for c in self.columns if c in X.columns])


class SquaredTermAdder(BaseEstimator, TransformerMixin):
    """
    Degree-2 polynomial expansion of numeric predictors.

    The original column stays as the degree-1 term and ``<col>_sq`` is added
    next to it. The set of expanded columns is fixed at fit time.
    """

    def __init__(self, columns=None):
        self.columns = columns

    def fit(self, X: pd.DataFrame, y=None):
        if self.columns is None:
            self.columns_ = list(X.select_dtypes(include='number').columns)
        else:
            self.columns_ = list(self.columns)
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        df = X.copy()
        for col in self.columns_:
            df[f'{col}_sq'] = df[col] ** 2
        return df


class InteractionAdder(BaseEstimator, TransformerMixin):
    """
    Pairwise products between column groups.

    A group name matches the column of that name or the dummy columns derived
    from it (``seasons`` -> ``seasons_Spring``, ``seasons_Summer``, ...).
    Squared terms are never part of a group.
    """

    def __init__(self, pairs=tuple(config.INTERACTION_PAIRS)):
        self.pairs = pairs

    @staticmethod
    def _match(columns, group: str) -> list:
        return [c for c in columns
                if (c == group or c.startswith(group + '_')) and not c.endswith('_sq')]

    def fit(self, X: pd.DataFrame, y=None):
        self.interactions_ = []
        for left, right in self.pairs:
            left_cols = self._match(X.columns, left)
            right_cols = self._match(X.columns, right)
            if not left_cols or not right_cols:
                # e.g. a single holiday level in a small fold leaves no dummy column
                logging.warning(f"No columns match interaction '{left}' x '{right}'; skipped")
                continue
            for a in left_cols:
                for b in right_cols:
                    self.interactions_.append((a, b))
        return self

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        df = X.copy()
        for a, b in self.interactions_:
            df[f'{a}_x_{b}'] = df[a] * df[b]
        return df


def make_encoder() -> ColumnTransformer:
    """Z-score numeric predictors and dummy-encode categorical ones."""
    encoder = ColumnTransformer(
        transformers=[
            ('num', StandardScaler(), make_column_selector(dtype_include='number')),
            ('cat', OneHotEncoder(drop='first', handle_unknown='ignore', sparse_output=False),
             make_column_selector(dtype_exclude='number')),
        ],
        remainder='drop',
        verbose_feature_names_out=False,
    )
    return encoder.set_output(transform='pandas')


def build_recipe(variant) -> Pipeline:
    """
    Build an unfitted feature recipe.

    Args:
        variant: RecipeVariant or its string value

    Returns:
        Pipeline: DataFrame-in / DataFrame-out transformation pipeline
    """
    variant = RecipeVariant(variant)

    steps = [
        ('day_type', DayTypeAdder()),
        ('drop', ColumnDropper()),
    ]
    if variant is RecipeVariant.POLYNOMIAL:
        steps.append(('poly', SquaredTermAdder()))
    steps.append(('encode', make_encoder()))
    if variant in (RecipeVariant.INTERACTIONS, RecipeVariant.POLYNOMIAL):
        steps.append(('interact', InteractionAdder()))

    return Pipeline(steps)


def describe_recipe(recipe: Pipeline) -> pd.DataFrame:
    """Normalization constants (mean, scale) learned by a fitted recipe."""
    scaler = recipe.named_steps['encode'].named_transformers_['num']
    return pd.DataFrame(
        {'mean': scaler.mean_, 'scale': scaler.scale_},
        index=pd.Index(scaler.feature_names_in_, name='feature'),
    )
