import numpy as np
import pytest

from rbf_surrogate import build
from rbf_surrogate.evaluation.metrics import (
    calculate_r2, calculate_rmse, generate_performance_report, interpolation_residuals
)
from rbf_surrogate.evaluation.plotting import plot_parity, plot_surrogate_1d


def test_metrics_on_perfect_prediction():
    y = np.array([1.0, 2.0, 3.0, 4.0])

    assert calculate_rmse(y, y) == 0.0
    assert calculate_r2(y, y) == pytest.approx(1.0)

    report = generate_performance_report(y, y)
    assert report == {'rmse': 0.0, 'r2': 1.0, 'max_abs_error': 0.0}


def test_report_on_flat_reference():
    y_true = np.full(4, 5.0)

    assert generate_performance_report(y_true, y_true)['r2'] == 1.0
    assert generate_performance_report(y_true, y_true + 1.0)['r2'] == 0.0


def test_report_multi_output():
    y_true = np.array([[0.0, 1.0], [1.0, 2.0], [2.0, 4.0]])
    y_pred = y_true + np.array([[0.0, 0.5], [0.0, 0.0], [0.0, 0.0]])

    report = generate_performance_report(y_true, y_pred)
    assert report['max_abs_error'] == pytest.approx(0.5)
    assert report['rmse'] == pytest.approx(np.sqrt(0.25 / 6))


def test_interpolation_residuals_are_small(samples_2d):
    X, y = samples_2d
    surrogate = build(X, y, [0.0, 0.0], [1.0, 1.0], kernel="cubic")

    residuals = interpolation_residuals(surrogate)
    assert residuals.shape == (X.shape[0], 1)
    assert residuals.max() < 1e-8


def test_plot_surrogate_1d(tmp_path):
    surrogate = build([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 0.0, 1.0], 0.0, 3.0, kernel="cubic")
    save_path = tmp_path / "surrogate.png"

    plot_surrogate_1d(surrogate, num_points=50, save_path=str(save_path))

    assert save_path.exists()


def test_plot_surrogate_1d_rejects_nd(samples_2d, tmp_path):
    X, y = samples_2d
    surrogate = build(X, y, [0.0, 0.0], [1.0, 1.0])

    with pytest.raises(ValueError):
        plot_surrogate_1d(surrogate, save_path=str(tmp_path / "nd.png"))


def test_plot_parity(tmp_path):
    save_path = tmp_path / "parity.png"
    plot_parity([1.0, 2.0, 3.0], [1.1, 1.9, 3.0], save_path=str(save_path))
    assert save_path.exists()
