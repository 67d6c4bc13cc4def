"""Surrogate evaluation: metrics and plotting."""

from .metrics import calculate_r2, calculate_rmse, generate_performance_report, interpolation_residuals

__all__ = ["calculate_r2", "calculate_rmse", "generate_performance_report", "interpolation_residuals"]
