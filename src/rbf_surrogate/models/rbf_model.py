"""
Radial Basis Function surrogate.

The model interpolates the training samples exactly: the coefficients are the
solution of the augmented (kernel + polynomial tail) system and are recomputed
from scratch every time samples are added.
"""
import logging
from typing import Optional, Tuple, Union

import numpy as np

from ..exceptions import ShapeMismatchError
from .kernels import LINEAR, RadialFunction, evaluate_kernel, get_kernel
from .polynomial import make_basis
from .solver import fit_coefficients
from .storage import get_storage

logger = logging.getLogger(__name__)


def _as_points(x, dim: Optional[int] = None) -> np.ndarray:
    """Sequence of scalars / tuples (or an array) -> array of shape (n, d)."""
    try:
        points = np.asarray(x, dtype=float)
    except ValueError as e:
        raise ShapeMismatchError(f"Input points have inconsistent shapes: {e}") from e
    if points.size == 0 and dim is not None:
        points = points.reshape(0, dim)
    if points.ndim == 1:
        points = points.reshape(-1, 1)
    if points.ndim != 2:
        raise ShapeMismatchError(f"Input points must be scalars or flat tuples, got an array of shape {points.shape}")
    if dim is not None and points.shape[1] != dim:
        raise ShapeMismatchError(f"Expected points of dimension {dim}, got {points.shape[1]}")
    return points


def _as_point(x, dim: int) -> np.ndarray:
    try:
        point = np.asarray(x, dtype=float).ravel()
    except ValueError as e:
        raise ShapeMismatchError(f"Invalid point {x!r}: {e}") from e
    if point.size != dim:
        raise ShapeMismatchError(f"Expected a point of dimension {dim}, got {point.size}")
    return point


def _as_outputs(y) -> Tuple[np.ndarray, bool]:
    """Sequence of scalars / tuples -> (array of shape (n, k), outputs_are_scalars)."""
    try:
        values = np.asarray(y, dtype=float)
    except ValueError as e:
        raise ShapeMismatchError(f"Output values have inconsistent shapes: {e}") from e
    if values.ndim == 1:
        return values.reshape(-1, 1), True
    if values.ndim == 2:
        return values, False
    raise ShapeMismatchError(f"Output values must be scalars or flat tuples, got an array of shape {values.shape}")


def _as_bounds(lb, ub, dim: int) -> Tuple[np.ndarray, np.ndarray]:
    lb = np.atleast_1d(np.asarray(lb, dtype=float))
    ub = np.atleast_1d(np.asarray(ub, dtype=float))
    if lb.shape != (dim,) or ub.shape != (dim,):
        raise ShapeMismatchError(f"Bounds must have length {dim}, got {lb.shape[0]} and {ub.shape[0]}")
    if np.any(lb >= ub):
        axes = np.flatnonzero(lb >= ub).tolist()
        raise ValueError(f"Lower bounds must be strictly below upper bounds (axes {axes}).")
    return lb, ub


class RadialBasis:
    """
    RBF interpolant with a polynomial tail.

    Args:
        x: Sample locations: scalars (1-D) or tuples of length d.
        y: Sample outputs: scalars or tuples of length k.
        lb, ub: Domain bounds (scalars when d == 1).
        kernel: RadialFunction, KernelType or kernel name. Defaults to linear.
        scale_factor: Positive scalar dividing every displacement.
        storage_mode: 'dense', 'sparse' or a storage strategy instance.
        degree: Polynomial tail degree. Defaults to the kernel's minimal degree.
        basis_kind: 'chebyshev' or 'monomial'. Defaults to Chebyshev in 1-D.
    """

    def __init__(self, x, y, lb, ub, kernel: Union[str, RadialFunction] = LINEAR, scale_factor: float = 1.0,
                 storage_mode="dense", degree: Optional[int] = None, basis_kind: Optional[str] = None):
        self.kernel = get_kernel(kernel)
        if not np.isfinite(scale_factor) or scale_factor <= 0:
            raise ValueError(f"scale_factor must be a positive number, got {scale_factor}")
        self.scale_factor = float(scale_factor)
        self.storage = get_storage(storage_mode)

        x = _as_points(x)
        y, self.scalar_output = _as_outputs(y)
        if x.shape[0] != y.shape[0]:
            raise ShapeMismatchError(f"Got {x.shape[0]} input points but {y.shape[0]} output values.")
        if x.shape[0] == 0:
            raise ShapeMismatchError("At least one sample is needed to build a surrogate.")

        self.lb, self.ub = _as_bounds(lb, ub, x.shape[1])
        self.degree = self.kernel.degree if degree is None else degree
        self.basis = make_basis(x.shape[1], self.degree, self.lb, self.ub, kind=basis_kind)

        self.coefficients = fit_coefficients(x, y, self.kernel, self.basis, self.scale_factor, self.storage)
        self.x = x
        self.y = y
        logger.info("RBF surrogate built: n=%d, d=%d, k=%d, tail size=%d",
                    self.num_samples, self.dim, self.output_dim, self.basis.size)

    @property
    def num_samples(self) -> int:
        return self.x.shape[0]

    @property
    def dim(self) -> int:
        return self.x.shape[1]

    @property
    def output_dim(self) -> int:
        return self.y.shape[1]

    def __repr__(self):
        return (f"{type(self).__name__}(n={self.num_samples}, d={self.dim}, k={self.output_dim}, "
                f"degree={self.degree}, scale_factor={self.scale_factor}, storage={self.storage.name})")

    def predict_values(self, points) -> np.ndarray:
        """
        Predicts a batch of points.

        points has shape (m, d) (or (m,) for 1-D inputs); the result has shape (m, k).
        """
        points = _as_points(points, self.dim)
        n = self.num_samples

        displacements = (points[:, None, :] - self.x[None, :, :]) / self.scale_factor
        kernel_values = evaluate_kernel(self.kernel, displacements)
        poly_values = self.basis.evaluate(points)

        return kernel_values @ self.coefficients[:n] + poly_values @ self.coefficients[n:]

    def __call__(self, point):
        """
        Prediction at a single point, shaped like the training outputs: a float
        for scalar outputs, a tuple of floats otherwise.
        """
        approx = self.predict_values(_as_point(point, self.dim)[None, :])[0]
        if self.scalar_output:
            return float(approx[0])
        return tuple(float(v) for v in approx)

    def _refit(self, new_x: np.ndarray, new_y: np.ndarray):
        x = np.vstack([self.x, new_x])
        y = np.vstack([self.y, new_y])
        # nothing is replaced unless the enlarged system solves
        coefficients = fit_coefficients(x, y, self.kernel, self.basis, self.scale_factor, self.storage)
        self.x, self.y, self.coefficients = x, y, coefficients

    def add_point(self, new_x, new_y):
        """Adds one sample pair and re-solves the whole system."""
        point = _as_point(new_x, self.dim)
        value = np.asarray(new_y, dtype=float)
        if self.scalar_output and value.ndim != 0:
            raise ShapeMismatchError(f"Surrogate was trained on scalar outputs, got {new_y!r}")
        if not self.scalar_output and value.shape != (self.output_dim,):
            raise ShapeMismatchError(f"Expected an output of length {self.output_dim}, got {new_y!r}")

        self._refit(point[None, :], value.reshape(1, -1))
        logger.info("Added 1 sample, surrogate now has %d", self.num_samples)

    def add_points(self, new_xs, new_ys):
        """Adds an ordered sequence of sample pairs and re-solves the whole system."""
        points = _as_points(new_xs, self.dim)
        values, scalar = _as_outputs(new_ys)
        if points.shape[0] != values.shape[0]:
            raise ShapeMismatchError(f"Got {points.shape[0]} new points but {values.shape[0]} new values.")
        if points.shape[0] == 0:
            return
        if scalar != self.scalar_output or values.shape[1] != self.output_dim:
            raise ShapeMismatchError(
                f"New outputs of shape {values.shape[1:]} do not match the stored outputs "
                f"({'scalars' if self.scalar_output else f'tuples of length {self.output_dim}'})."
            )

        self._refit(points, values)
        logger.info("Added %d samples, surrogate now has %d", points.shape[0], self.num_samples)
