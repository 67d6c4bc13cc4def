"""
Assembly of the augmented RBF interpolation system.

    | Phi  P | |c|   |Y|
    | P^T  0 | |a| = |0|

Phi[i, j] = phi((x_i - x_j) / scale_factor) and P[i, k] = basis_k(x_i). Only
the upper triangle is computed; the storage strategy mirrors it.
"""
import logging

import numpy as np
from scipy.spatial.distance import pdist

from ..exceptions import DegenerateGeometryError
from .kernels import RadialFunction, evaluate_kernel

logger = logging.getLogger(__name__)

# Minimum separation between two samples, relative to the mean half-diameter
# of the bounding box. Closer pairs agree in fewer than half of the significant
# digits of their coordinates and are treated as duplicates.
DUPLICATE_TOLERANCE = float(np.sqrt(np.finfo(float).eps))


def check_sample_geometry(X: np.ndarray, basis, tolerance: float = DUPLICATE_TOLERANCE):
    """
    Rejects sample sets that cannot produce a well-posed system: duplicate
    or near-duplicate locations, and fewer samples than polynomial terms.
    """
    n = X.shape[0]
    if n < basis.size:
        raise DegenerateGeometryError(
            f"At least {basis.size} samples are needed for a polynomial tail of degree {basis.degree} "
            f"in {X.shape[1]} dimension(s), got {n}."
        )
    if n < 2:
        return

    mean_half_diameter = float(np.mean((basis.ub - basis.lb) / 2.0))
    distances = pdist(X)
    min_distance = tolerance * mean_half_diameter
    close = np.flatnonzero(distances <= min_distance)
    if close.size:
        # pdist orders pairs like the strict upper triangle
        rows, cols = np.triu_indices(n, k=1)
        i, j = rows[close[0]], cols[close[0]]
        raise DegenerateGeometryError(
            f"Samples {i} and {j} are duplicates (distance {distances[close[0]]:.3e} <= {min_distance:.3e})."
        )


def assemble_system(X: np.ndarray, kernel: RadialFunction, basis, scale_factor: float, storage):
    """
    Builds the (n + p) x (n + p) symmetric interpolation matrix.

    Args:
        X: Sample locations, shape (n, d).
        kernel: Radial function.
        basis: Polynomial tail (size p).
        scale_factor: Positive scalar dividing every displacement.
        storage: Strategy that materializes the matrix (dense or sparse).

    Returns:
        The matrix in the representation chosen by the storage strategy.
    """
    n = X.shape[0]
    p = basis.size
    size = n + p

    # kernel block, upper triangle including the diagonal
    rows, cols = np.triu_indices(n)
    displacements = (X[rows] - X[cols]) / scale_factor
    kernel_values = evaluate_kernel(kernel, displacements)

    # polynomial block P, rows 0..n-1 and columns n..n+p-1
    poly_values = basis.evaluate(X)
    poly_rows = np.repeat(np.arange(n), p)
    poly_cols = n + np.tile(np.arange(p), n)

    all_rows = np.concatenate([rows, poly_rows])
    all_cols = np.concatenate([cols, poly_cols])
    all_values = np.concatenate([kernel_values, poly_values.ravel()])

    logger.debug("Assembling %dx%d interpolation system (%s storage, n=%d, p=%d)",
                 size, size, getattr(storage, "name", type(storage).__name__), n, p)
    return storage.from_upper_triangle(size, all_rows, all_cols, all_values)


def assemble_rhs(Y: np.ndarray, p: int) -> np.ndarray:
    """Stacks the sample outputs (n, k) on top of p zero rows."""
    Y = np.asarray(Y, dtype=float)
    return np.vstack([Y, np.zeros((p, Y.shape[1]), dtype=float)])
