"""
model_families.py

The closed set of regression model families compared in this project.
Each family knows how to build its scikit-learn estimator, which
hyperparameters it tunes and which feature recipe it uses by default.
"""

from enum import Enum

import numpy as np
from sklearn.ensemble import BaggingRegressor, RandomForestRegressor
from sklearn.linear_model import Lasso, LinearRegression
from sklearn.tree import DecisionTreeRegressor

from src import config
from src.preprocessing.feature_engineering import RecipeVariant


class ModelFamily(Enum):
    LINEAR = 'linear'
    LASSO = 'lasso'
    DECISION_TREE = 'decision_tree'
    BAGGED_TREE = 'bagged_tree'
    RANDOM_FOREST = 'random_forest'

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ').title()

    @property
    def default_recipe(self) -> RecipeVariant:
        return RecipeVariant(config.FAMILY_RECIPES[self.value])

    def build_estimator(self, seed: int = config.RANDOM_SEED, **params):
        """Unfitted estimator with the family's fixed hyperparameters."""
        if self is ModelFamily.LINEAR:
            estimator = LinearRegression()
        elif self is ModelFamily.LASSO:
            estimator = Lasso(max_iter=20000)
        elif self is ModelFamily.DECISION_TREE:
            estimator = DecisionTreeRegressor(random_state=seed)
        elif self is ModelFamily.BAGGED_TREE:
            estimator = BaggingRegressor(
                estimator=DecisionTreeRegressor(),
                n_estimators=50,
                random_state=seed,
            )
        else:
            estimator = RandomForestRegressor(n_estimators=300, random_state=seed)
        return estimator.set_params(**params)

    def param_grid(self) -> dict:
        """
        Candidate hyperparameters, keyed by pipeline parameter name.

        An empty dict means the family has nothing to tune; the grid search
        still cross-validates its single configuration.
        """
        if self is ModelFamily.LINEAR:
            return {}
        if self is ModelFamily.LASSO:
            return {'model__alpha': [float(a) for a in np.logspace(-2, 3, 11)]}
        if self is ModelFamily.DECISION_TREE:
            return {
                'model__max_depth': [2, 4, 8, None],
                'model__min_samples_split': [2, 10, 20],
                'model__ccp_alpha': [0.0, 1e4, 1e5],
            }
        if self is ModelFamily.BAGGED_TREE:
            return {
                'model__estimator__max_depth': [4, 8, None],
                'model__estimator__min_samples_split': [2, 10, 20],
            }
        return {
            'model__max_features': [0.33, 0.66, 1.0],
            'model__min_samples_leaf': [1, 5, 10],
        }
