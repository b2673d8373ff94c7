"""Vector helpers over NumPy arrays.

Vectors are plain 1-D ``numpy.ndarray`` objects of float64. The helpers here
add the handful of operations the renderer needs on top of NumPy: safe
normalization, homogeneous coordinates and checked element access.

Example:
    >>> from lumen.linalg.vector import vector, normalize, cross
    >>> x = vector(1.0, 0.0, 0.0)
    >>> y = vector(0.0, 1.0, 0.0)
    >>> cross(x, y)
    array([0., 0., 1.])
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

Vector = npt.NDArray[np.float64]


def vector(*components: float) -> Vector:
    """Create a float64 vector from its components."""
    return np.array(components, dtype=np.float64)


def as_vector(values: Sequence[float] | npt.ArrayLike, size: int | None = None) -> Vector:
    """Convert any sequence to a float64 vector, optionally checking its size.

    Raises:
        ValueError: If ``size`` is given and the input has a different length.
    """
    result = np.array(values, dtype=np.float64).reshape(-1)
    if size is not None and result.shape[0] != size:
        raise ValueError(f"Expected a {size}-vector, got {result.shape[0]} components")
    return result


def zeros(size: int) -> Vector:
    return np.zeros(size, dtype=np.float64)


def ones(size: int) -> Vector:
    return np.ones(size, dtype=np.float64)


def unit(size: int, axis: int) -> Vector:
    """Return the basis vector along ``axis``.

    Raises:
        IndexError: If ``axis`` is outside ``[0, size)``.
    """
    if not 0 <= axis < size:
        raise IndexError(f"Axis {axis} out of range for a {size}-vector")
    result = zeros(size)
    result[axis] = 1.0
    return result


def at(v: Vector, index: int) -> float:
    """Checked element access.

    Negative indices are rejected rather than wrapped around.

    Raises:
        IndexError: If ``index`` is outside ``[0, len(v))``.
    """
    if not 0 <= index < v.shape[0]:
        raise IndexError(f"Index {index} out of range for a {v.shape[0]}-vector")
    return float(v[index])


def dot(a: Vector, b: Vector) -> float:
    return float(np.dot(a, b))


def cross(a: Vector, b: Vector) -> Vector:
    return np.cross(a, b).astype(np.float64)


def norm(v: Vector) -> float:
    return float(np.linalg.norm(v))


def normalize(v: Vector) -> Vector:
    """Normalize a vector to unit length.

    The zero vector normalizes to the zero vector instead of producing NaNs.
    """
    length = np.linalg.norm(v)
    if length == 0.0:
        return np.zeros_like(v, dtype=np.float64)
    return v / length


def lerp(a: Vector, b: Vector, t: float) -> Vector:
    """Linear interpolation ``a + t * (b - a)``; extrapolates outside [0, 1]."""
    return a + t * (b - a)


def component_min(a: Vector, b: Vector) -> Vector:
    return np.minimum(a, b)


def component_max(a: Vector, b: Vector) -> Vector:
    return np.maximum(a, b)


def resize_dim(v: Vector, size: int, fill: float = 0.0) -> Vector:
    """Truncate or extend a vector to ``size`` components, padding with ``fill``."""
    result = np.full(size, fill, dtype=np.float64)
    count = min(size, v.shape[0])
    result[:count] = v[:count]
    return result


def to_homogeneous_point(v: Vector) -> Vector:
    """Append w = 1 (affected by translation)."""
    return resize_dim(v, v.shape[0] + 1, 1.0)


def to_homogeneous_dir(v: Vector) -> Vector:
    """Append w = 0 (unaffected by translation)."""
    return resize_dim(v, v.shape[0] + 1, 0.0)
