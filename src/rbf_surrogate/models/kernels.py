"""
Radial kernels for the RBF surrogate.

Each kernel is a (degree, phi) pair: ``phi`` maps a displacement vector to a
scalar and ``degree`` is the minimal polynomial tail degree that makes the
interpolation system well posed.
"""
from enum import Enum
from typing import Callable, NamedTuple, Union

import numpy as np


class RadialFunction(NamedTuple):
    degree: int
    phi: Callable
    # True when phi accepts an array of displacements (..., d) and returns (...)
    vectorized: bool = False


def _linear(z):
    return np.linalg.norm(z, axis=-1)


def _cubic(z):
    return np.linalg.norm(z, axis=-1) ** 3


def _multiquadric(z):
    return np.sqrt(np.sum(np.square(z), axis=-1) + 1.0)


def _thin_plate(z):
    r = np.linalg.norm(z, axis=-1)
    with np.errstate(divide='ignore', invalid='ignore'):
        result = np.square(r) * np.log(r)
    return np.where(r == 0.0, 0.0, result)


LINEAR = RadialFunction(0, _linear, vectorized=True)
CUBIC = RadialFunction(1, _cubic, vectorized=True)
MULTIQUADRIC = RadialFunction(1, _multiquadric, vectorized=True)
THIN_PLATE = RadialFunction(2, _thin_plate, vectorized=True)


class KernelType(Enum):
    LINEAR = "linear"
    CUBIC = "cubic"
    MULTIQUADRIC = "multiquadric"
    THIN_PLATE = "thin_plate"


KERNELS = {
    KernelType.LINEAR.value: LINEAR,
    KernelType.CUBIC.value: CUBIC,
    KernelType.MULTIQUADRIC.value: MULTIQUADRIC,
    KernelType.THIN_PLATE.value: THIN_PLATE,
}


def get_kernel(kernel: Union[str, KernelType, RadialFunction]) -> RadialFunction:
    """Resolve a kernel name, a KernelType or a RadialFunction into a RadialFunction."""
    if isinstance(kernel, RadialFunction):
        if int(kernel.degree) != kernel.degree or kernel.degree < 0:
            raise ValueError(f"Kernel degree must be a non-negative integer, got {kernel.degree}")
        return kernel
    if isinstance(kernel, KernelType):
        kernel = kernel.value
    if kernel not in KERNELS:
        raise ValueError(f"Unknown kernel: {kernel}. Available: {list(KERNELS.keys())}")
    return KERNELS[kernel]


def evaluate_kernel(kernel: RadialFunction, displacements: np.ndarray) -> np.ndarray:
    """
    Apply a kernel to an array of displacement vectors.

    Args:
        kernel: The radial function.
        displacements: Array of shape (..., d), already divided by the scale factor.

    Returns:
        Array of shape (...) with one kernel value per displacement.
    """
    displacements = np.asarray(displacements, dtype=float)
    if kernel.vectorized:
        return np.asarray(kernel.phi(displacements), dtype=float)

    flat = displacements.reshape(-1, displacements.shape[-1])
    values = np.array([float(kernel.phi(z)) for z in flat], dtype=float)
    return values.reshape(displacements.shape[:-1])
