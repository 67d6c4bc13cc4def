"""
Diagnostic plots for fitted surrogates.
"""
import logging

import numpy as np
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def plot_surrogate_1d(surrogate, num_points: int = 200, output_index: int = 0,
                      save_path: str = "surrogate_1d.png"):
    """
    Plots a 1-D surrogate over [lb, ub] together with its training samples.
    """
    if surrogate.dim != 1:
        raise ValueError(f"plot_surrogate_1d only supports 1-D inputs, got d={surrogate.dim}")

    grid = np.linspace(surrogate.lb[0], surrogate.ub[0], num_points)
    prediction = surrogate.predict_values(grid)[:, output_index]

    plt.figure(figsize=(10, 6))
    plt.plot(grid, prediction, label='Surrogate', color='blue', linewidth=2)
    plt.scatter(surrogate.x[:, 0], surrogate.y[:, output_index], label='Samples', color='black', zorder=3)

    plt.title('RBF surrogate')
    plt.xlabel('x')
    plt.ylabel(f'Output {output_index}')
    plt.legend()
    plt.grid(True, which='both', linestyle='--', linewidth=0.5)
    plt.savefig(save_path)
    plt.close()
    logger.info("Surrogate plot saved to %s", save_path)


def plot_parity(y_true, y_pred, save_path: str = "surrogate_parity.png"):
    """
    Predicted vs. reference scatter plot; an exact surrogate sits on the diagonal.
    """
    y_true = np.asarray(y_true, dtype=float).ravel()
    y_pred = np.asarray(y_pred, dtype=float).ravel()

    low = min(y_true.min(), y_pred.min())
    high = max(y_true.max(), y_pred.max())

    plt.figure(figsize=(8, 8))
    plt.scatter(y_true, y_pred, alpha=0.7)
    plt.plot([low, high], [low, high], color='red', linestyle=':', linewidth=2, label='y = x')
    plt.title('Predicted vs. reference values')
    plt.xlabel('Reference')
    plt.ylabel('Surrogate')
    plt.legend()
    plt.grid(True)
    plt.savefig(save_path)
    plt.close()
    logger.info("Parity plot saved to %s", save_path)
