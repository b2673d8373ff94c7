"""Host-side linear algebra for scene assembly.

This module holds the double-precision numerics used outside of Taichi
kernels, when scenes are built and uploaded:

Components:
    vector: Vector helpers over 1-D NumPy arrays
    matrix: Matrix helpers, determinant and inverse
    quaternion: Rotations as unit quaternions
    transform: Affine transforms with a synchronized inverse
    color: Color-space utilities (sRGB, luminance, alpha compositing)

Kernel code never touches these types directly: transforms and colors are
flattened into Taichi fields by the scene storage layer.
"""

from .matrix import SingularMatrixError
from .quaternion import Quaternion, slerp
from .transform import Transform, transform_direction, transform_normal, transform_point

__all__ = [
    "SingularMatrixError",
    "Quaternion",
    "slerp",
    "Transform",
    "transform_point",
    "transform_direction",
    "transform_normal",
]
