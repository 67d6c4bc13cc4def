"""Direct solve of the interpolation system, with one conditioning check for every storage strategy."""
import logging

import numpy as np
from scipy.sparse.linalg import LinearOperator, onenormest

from ..exceptions import DegenerateGeometryError
from .assembly import assemble_rhs, assemble_system, check_sample_geometry

logger = logging.getLogger(__name__)

# Same cut-off LAPACK uses for its ill-conditioning warning.
RCOND_TOLERANCE = np.finfo(float).eps


def estimate_rcond(matrix, factors, storage) -> float:
    """
    Reciprocal 1-norm condition number, 1 / (||D||_1 * ||D^-1||_1).

    ||D^-1||_1 is estimated from the LU factors with scipy's block 1-norm
    estimator, so the inverse is never formed.
    """
    inverse = LinearOperator(
        factors.shape,
        matvec=factors.solve,
        rmatvec=lambda b: factors.solve(b, trans="T"),
        dtype=float,
    )
    with np.errstate(all="ignore"):
        inverse_norm = onenormest(inverse)
        return float(1.0 / (storage.one_norm(matrix) * inverse_norm))


def solve_coefficients(matrix, rhs: np.ndarray, storage) -> np.ndarray:
    """
    Solves D @ C = Y_aug for all output columns at once.

    Raises DegenerateGeometryError when the system is singular or its
    estimated reciprocal condition number is below RCOND_TOLERANCE.
    """
    factors = storage.factorize(matrix)

    rcond = estimate_rcond(matrix, factors, storage)
    if not np.isfinite(rcond) or rcond < RCOND_TOLERANCE:
        raise DegenerateGeometryError(
            f"Interpolation system is ill-conditioned (reciprocal condition number {rcond:.3e})."
        )

    coefficients = np.asarray(factors.solve(rhs), dtype=float).reshape(rhs.shape)
    if not np.all(np.isfinite(coefficients)):
        raise DegenerateGeometryError("Solving the interpolation system produced non-finite coefficients.")

    logger.debug("Solved interpolation system: coefficients shape %s, rcond %.3e", coefficients.shape, rcond)
    return coefficients


def fit_coefficients(X: np.ndarray, Y: np.ndarray, kernel, basis, scale_factor: float, storage) -> np.ndarray:
    """Geometry check, assembly and solve for one sample set."""
    check_sample_geometry(X, basis)
    matrix = assemble_system(X, kernel, basis, scale_factor, storage)
    rhs = assemble_rhs(Y, basis.size)
    return solve_coefficients(matrix, rhs, storage)
