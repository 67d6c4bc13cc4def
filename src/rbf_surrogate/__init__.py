"""rbf-surrogate - Radial Basis Function surrogates of expensive black-box functions.

Fits exact RBF interpolants with a polynomial tail on scattered samples,
evaluates them at arbitrary points and absorbs new samples by refitting.
"""

from .exceptions import DegenerateGeometryError, ShapeMismatchError, UnsupportedBasisError
from .factory import SurrogateFactory, add_point, add_points, build
from .models.kernels import CUBIC, LINEAR, MULTIQUADRIC, THIN_PLATE, KernelType, RadialFunction
from .models.rbf_model import RadialBasis

__version__ = "0.1.0"
__all__ = [
    "build", "add_point", "add_points", "SurrogateFactory", "RadialBasis",
    "KernelType", "RadialFunction", "LINEAR", "CUBIC", "MULTIQUADRIC", "THIN_PLATE",
    "ShapeMismatchError", "DegenerateGeometryError", "UnsupportedBasisError",
]
