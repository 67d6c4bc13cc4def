"""
Storage strategies for the interpolation matrix.

A strategy knows how to turn the upper triangle of a symmetric system into a
matrix, how to take its 1-norm and how to LU-factorize it. The factorization
exposes ``shape`` and ``solve(rhs, trans)``, like ``scipy.sparse.linalg.SuperLU``,
so the solver applies the same conditioning check to every strategy.
"""
import logging
import warnings
from typing import Union

import numpy as np
import scipy.linalg as scplinalg
import scipy.sparse as scpsparse
import scipy.sparse.linalg as scpsplinalg

from ..exceptions import DegenerateGeometryError

logger = logging.getLogger(__name__)


class DenseLU:
    """LAPACK LU factors of a dense matrix."""

    def __init__(self, matrix: np.ndarray):
        self.shape = matrix.shape
        try:
            with warnings.catch_warnings():
                # lu_factor warns instead of raising on an exactly zero pivot
                warnings.simplefilter("error", scplinalg.LinAlgWarning)
                self._factors = scplinalg.lu_factor(matrix)
        except scplinalg.LinAlgWarning as e:
            raise DegenerateGeometryError(f"Interpolation system is singular: {e}") from e

    def solve(self, rhs: np.ndarray, trans: str = "N") -> np.ndarray:
        return scplinalg.lu_solve(self._factors, rhs, trans=0 if trans == "N" else 1)


class DenseStorage:
    """numpy arrays + LAPACK LU."""

    name = "dense"

    def from_upper_triangle(self, size: int, rows: np.ndarray, cols: np.ndarray, values: np.ndarray) -> np.ndarray:
        upper = np.zeros((size, size), dtype=float)
        upper[rows, cols] = values
        return upper + np.triu(upper, k=1).T

    def one_norm(self, matrix: np.ndarray) -> float:
        return float(np.linalg.norm(matrix, 1))

    def factorize(self, matrix: np.ndarray) -> DenseLU:
        return DenseLU(matrix)


class SparseStorage:
    """scipy.sparse COO assembly + SuperLU on CSC."""

    name = "sparse"

    def from_upper_triangle(self, size: int, rows: np.ndarray, cols: np.ndarray, values: np.ndarray):
        nonzero = values != 0.0
        upper = scpsparse.coo_matrix(
            (values[nonzero], (rows[nonzero], cols[nonzero])), shape=(size, size)
        ).tocsr()
        return (upper + scpsparse.triu(upper, k=1).T).tocsc()

    def one_norm(self, matrix) -> float:
        return float(scpsplinalg.norm(matrix, 1))

    def factorize(self, matrix) -> scpsplinalg.SuperLU:
        try:
            return scpsplinalg.splu(scpsparse.csc_matrix(matrix))
        except RuntimeError as e:
            # SuperLU reports exactly singular factors as RuntimeError
            raise DegenerateGeometryError(f"Interpolation system is singular: {e}") from e


STORAGE_MODES = {
    DenseStorage.name: DenseStorage,
    SparseStorage.name: SparseStorage,
}


def get_storage(storage_mode: Union[str, DenseStorage, SparseStorage]):
    """Resolve 'dense' / 'sparse' (or a strategy instance) into a storage strategy."""
    if all(hasattr(storage_mode, attr) for attr in ("from_upper_triangle", "one_norm", "factorize")):
        return storage_mode
    if storage_mode not in STORAGE_MODES:
        raise ValueError(f"Unknown storage mode: {storage_mode}. Available: {list(STORAGE_MODES.keys())}")
    return STORAGE_MODES[storage_mode]()
