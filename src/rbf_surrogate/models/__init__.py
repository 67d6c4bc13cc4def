"""RBF surrogate building blocks: kernels, polynomial tails, assembly and the model."""

from .kernels import CUBIC, LINEAR, MULTIQUADRIC, THIN_PLATE, KernelType, RadialFunction, get_kernel
from .polynomial import ChebyshevBasis, MonomialBasis, make_basis
from .rbf_model import RadialBasis
from .storage import DenseStorage, SparseStorage

__all__ = [
    "CUBIC", "LINEAR", "MULTIQUADRIC", "THIN_PLATE", "KernelType", "RadialFunction", "get_kernel",
    "ChebyshevBasis", "MonomialBasis", "make_basis",
    "RadialBasis",
    "DenseStorage", "SparseStorage",
]
