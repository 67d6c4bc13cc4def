"""Shared pytest configuration and fixtures."""

import logging

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

# Surface all log output during tests so failures are easy to diagnose.
logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def samples_2d():
    """15 scattered 2-D points in [0, 1]^2 with a smooth scalar response."""
    rng = np.random.default_rng(42)
    X = rng.random((15, 2))
    y = np.sin(3 * X[:, 0]) + X[:, 1] ** 2
    return X, y
