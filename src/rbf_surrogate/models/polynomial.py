"""
Polynomial tails for the augmented RBF system.

Two bases are available: Chebyshev polynomials rescaled onto [lb, ub] for
one-dimensional inputs and centered monomials of bounded total degree for any
dimension.
"""
import logging
from functools import partial
from itertools import combinations_with_replacement
from math import comb
from typing import Callable, List, Optional, Tuple

import numpy as np
from numpy.polynomial import chebyshev

from ..exceptions import UnsupportedBasisError

logger = logging.getLogger(__name__)


def basis_size(dim: int, degree: int) -> int:
    """Number of polynomials of total degree <= degree in dim variables."""
    return comb(degree + dim, degree)


def monomial_exponents(dim: int, degree: int) -> List[Tuple[int, ...]]:
    """
    Enumerates the multi-indices of every monomial of total degree <= degree.

    The list is ordered by total degree, so the constant term comes first,
    followed by x_1..x_d, then the quadratic terms, and so on.
    """
    exponents = []
    for total in range(degree + 1):
        for variables in combinations_with_replacement(range(dim), total):
            counts = np.bincount(np.asarray(variables, dtype=int), minlength=dim)
            exponents.append(tuple(int(c) for c in counts))
    return exponents


def _evaluate_single(basis, k, point):
    return float(basis.evaluate(np.asarray(point, dtype=float).reshape(1, -1))[0, k])


class _PolynomialBasis:

    def __init__(self, degree: int, lb: np.ndarray, ub: np.ndarray):
        self.degree = degree
        self.lb = lb
        self.ub = ub
        self.dim = len(lb)

    @property
    def size(self) -> int:
        return basis_size(self.dim, self.degree)

    def __len__(self):
        return self.size

    @property
    def functions(self) -> List[Callable]:
        """The basis as an ordered list of point -> scalar callables."""
        return [partial(_evaluate_single, self, k) for k in range(self.size)]

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class ChebyshevBasis(_PolynomialBasis):
    """T_0..T_degree on the interval [lb, ub] (1-D inputs only)."""

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=float).reshape(-1, 1)
        t = -1.0 + 2.0 * (points[:, 0] - self.lb[0]) / (self.ub[0] - self.lb[0])
        # chebvander matches cos(k*arccos(t)) on [-1, 1] and stays finite outside
        return chebyshev.chebvander(t, self.degree)


class MonomialBasis(_PolynomialBasis):
    """Centered monomials ((x - c) / h)^alpha with |alpha| <= degree."""

    def __init__(self, degree: int, lb: np.ndarray, ub: np.ndarray):
        super().__init__(degree, lb, ub)
        self.center = (lb + ub) / 2.0
        self.mean_half_diameter = float(np.mean((ub - lb) / 2.0))
        self.exponents = np.array(monomial_exponents(self.dim, degree), dtype=int).reshape(-1, self.dim)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=float).reshape(-1, self.dim)
        scaled = (points - self.center) / self.mean_half_diameter
        return np.prod(scaled[:, None, :] ** self.exponents[None, :, :], axis=2)


BASIS_KINDS = {
    "chebyshev": ChebyshevBasis,
    "monomial": MonomialBasis,
}


def make_basis(dim: int, degree: int, lb, ub, kind: Optional[str] = None) -> _PolynomialBasis:
    """
    Builds the polynomial tail for a given input dimension and degree.

    Args:
        dim: Input dimensionality d (>= 1).
        degree: Total polynomial degree q (>= 0).
        lb, ub: Domain bounds used to center and rescale the basis.
        kind: 'chebyshev' or 'monomial'. By default Chebyshev is used when
              dim == 1 and monomials otherwise.

    Returns:
        A basis object exposing size, evaluate(points) and functions.
    """
    if isinstance(dim, bool) or int(dim) != dim or dim < 1:
        raise UnsupportedBasisError(f"Input dimension must be a positive integer, got {dim}")
    if isinstance(degree, bool) or int(degree) != degree or degree < 0:
        raise UnsupportedBasisError(f"Polynomial degree must be a non-negative integer, got {degree}")
    dim, degree = int(dim), int(degree)

    if kind is None:
        kind = "chebyshev" if dim == 1 else "monomial"
    if kind not in BASIS_KINDS:
        raise UnsupportedBasisError(f"Unknown basis kind: {kind}. Available: {list(BASIS_KINDS.keys())}")
    if kind == "chebyshev" and dim != 1:
        raise UnsupportedBasisError(f"The Chebyshev basis only supports 1-D inputs, got d={dim}")

    lb = np.atleast_1d(np.asarray(lb, dtype=float))
    ub = np.atleast_1d(np.asarray(ub, dtype=float))
    if lb.shape != (dim,) or ub.shape != (dim,):
        raise UnsupportedBasisError(f"Bounds must have length {dim}, got {lb.shape} and {ub.shape}")

    basis = BASIS_KINDS[kind](degree, lb, ub)
    logger.debug("Polynomial basis %s: d=%d, degree=%d, size=%d", kind, dim, degree, basis.size)
    return basis
