"""Exceptions raised while fitting or querying an RBF surrogate."""

import numpy as np


class ShapeMismatchError(ValueError):
    """Samples, outputs or query points disagree in length or shape."""


class DegenerateGeometryError(np.linalg.LinAlgError):
    """The sample geometry makes the interpolation system singular."""


class UnsupportedBasisError(ValueError):
    """The requested polynomial basis (dimension, degree, kind) is not available."""
