"""Regression accuracy metrics shared by the tuner and the evaluator."""

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error


def regression_metrics(y_true, y_pred) -> dict:
    """
    Root-mean-squared and mean-absolute error of a set of predictions.

    Args:
        y_true: Observed values
        y_pred: Predicted values (same length)

    Returns:
        dict: {'rmse': float, 'mae': float}

    Raises:
        ValueError: On empty input, length mismatch or non-finite values
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if y_true.size == 0:
        raise ValueError("Cannot compute metrics on an empty set of observations")
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Shape mismatch: {y_true.shape} observed vs {y_pred.shape} predicted")
    if not (np.isfinite(y_true).all() and np.isfinite(y_pred).all()):
        raise ValueError("Observed and predicted values must be finite")

    return {
        'rmse': float(np.sqrt(mean_squared_error(y_true, y_pred))),
        'mae': float(mean_absolute_error(y_true, y_pred)),
    }
