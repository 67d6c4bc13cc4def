"""
Accuracy metrics for fitted surrogates.
"""
import numpy as np
from sklearn.metrics import r2_score, mean_squared_error
from typing import Dict


def calculate_r2(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    R-squared score. Closer to 1.0 is better.
    """
    return r2_score(y_true, y_pred)


def calculate_rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Root mean squared error. Lower is better.
    """
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def generate_performance_report(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
    """
    Global metrics between reference values and surrogate predictions.

    Args:
        y_true: Reference outputs, shape (m,) or (m, k).
        y_pred: Predicted outputs with the same shape.

    Returns:
        Dict with 'rmse', 'r2' and 'max_abs_error'.
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float).reshape(y_true.shape)

    rmse = calculate_rmse(y_true, y_pred)
    # r2 is undefined for flat references
    if len(y_true) < 2 or np.var(y_true) < 1e-12:
        r2 = 1.0 if rmse < 1e-9 else 0.0
    else:
        r2 = float(calculate_r2(y_true, y_pred))

    return {
        'rmse': rmse,
        'r2': r2,
        'max_abs_error': float(np.max(np.abs(y_true - y_pred))),
    }


def interpolation_residuals(surrogate) -> np.ndarray:
    """
    Absolute error of the surrogate at its own training samples, shape (n, k).

    An exact interpolant gives values at solver round-off level.
    """
    return np.abs(surrogate.predict_values(surrogate.x) - surrogate.y)
