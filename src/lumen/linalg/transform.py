"""Affine transforms with a synchronized inverse.

A Transform owns a 4x4 world matrix M and its inverse M^-1. Every
constructor computes both, and the arrays are exposed read-only so the pair
can never drift apart. Composition follows matrix convention: ``a * b``
applies ``b`` first, then ``a``.

Points, directions and normals transform differently:

    transform_point(M, p)      = (M . [p, 1]).xyz      (includes translation)
    transform_direction(M, d)  = (M . [d, 0]).xyz      (ignores translation)
    transform_normal(M, n)     = normalize(((M^-1)^T . [n, 0]).xyz)

The inverse-transpose rule keeps normals perpendicular to transformed
tangents under non-uniform scale.

Example:
    >>> import math
    >>> from lumen.linalg import Quaternion, Transform, transform_point
    >>> t = Transform.from_trs((1.0, 0.0, 0.0), Quaternion(), (2.0, 2.0, 2.0))
    >>> transform_point(t, (1.0, 1.0, 1.0))
    array([3., 2., 2.])
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from lumen.linalg.matrix import Matrix, SingularMatrixError, inverse
from lumen.linalg.quaternion import Quaternion
from lumen.linalg.vector import Vector, as_vector, normalize


def _readonly(m: np.ndarray) -> Matrix:
    result = np.array(m, dtype=np.float64)
    result.flags.writeable = False
    return result


class Transform:
    """A 4x4 affine (or projective) transform and its inverse.

    Attributes:
        matrix: The world matrix M (read-only view).
        inverse_matrix: The inverse M^-1 (read-only view).
    """

    __slots__ = ("_matrix", "_inverse")

    def __init__(self) -> None:
        """Create the identity transform."""
        self._matrix = _readonly(np.eye(4))
        self._inverse = _readonly(np.eye(4))

    @classmethod
    def _from_pair(cls, m: np.ndarray, m_inv: np.ndarray) -> Transform:
        result = cls.__new__(cls)
        result._matrix = _readonly(m)
        result._inverse = _readonly(m_inv)
        return result

    @property
    def matrix(self) -> Matrix:
        return self._matrix

    @property
    def inverse_matrix(self) -> Matrix:
        return self._inverse

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def identity(cls) -> Transform:
        return cls()

    @classmethod
    def from_matrix(cls, m: Sequence[Sequence[float]] | np.ndarray) -> Transform:
        """Wrap an arbitrary 4x4 matrix, computing its inverse.

        Raises:
            ValueError: If the matrix is not 4x4.
            SingularMatrixError: If the matrix cannot be inverted.
        """
        arr = np.array(m, dtype=np.float64)
        if arr.shape != (4, 4):
            raise ValueError(f"Transform requires a 4x4 matrix, got shape {arr.shape}")
        return cls._from_pair(arr, inverse(arr))

    @classmethod
    def from_trs(
        cls,
        translation: Sequence[float],
        rotation: Quaternion,
        scale: Sequence[float],
    ) -> Transform:
        """Build T . R . S, so points are scaled, then rotated, then translated.

        The inverse is assembled analytically as S^-1 . R^T . T^-1.

        Raises:
            SingularMatrixError: If any scale component is zero.
        """
        t = as_vector(translation, 3)
        s = as_vector(scale, 3)
        r = rotation.normalized().to_matrix3()

        m = np.eye(4)
        m[:3, :3] = r * s[np.newaxis, :]
        m[:3, 3] = t

        if np.any(s == 0.0):
            raise SingularMatrixError(f"Scale {s.tolist()} has a zero component")

        inv_s = 1.0 / s
        m_inv = np.eye(4)
        m_inv[:3, :3] = inv_s[:, np.newaxis] * r.T
        m_inv[:3, 3] = -(m_inv[:3, :3] @ t)
        return cls._from_pair(m, m_inv)

    @classmethod
    def translation(cls, offset: Sequence[float]) -> Transform:
        return cls.from_trs(offset, Quaternion(), (1.0, 1.0, 1.0))

    @classmethod
    def rotation(cls, rotation: Quaternion) -> Transform:
        return cls.from_trs((0.0, 0.0, 0.0), rotation, (1.0, 1.0, 1.0))

    @classmethod
    def scaling(cls, factors: Sequence[float]) -> Transform:
        return cls.from_trs((0.0, 0.0, 0.0), Quaternion(), factors)

    @classmethod
    def look_at(
        cls,
        eye: Sequence[float],
        target: Sequence[float],
        up: Sequence[float],
    ) -> Transform:
        """Camera-to-world frame: the camera looks along its -Z axis with +Y up.

        Columns of the rotation block are (right, true_up, -forward) where
        forward = normalize(target - eye), right = normalize(forward x up)
        and true_up = right x forward.
        """
        e = as_vector(eye, 3)
        forward = normalize(as_vector(target, 3) - e)
        right = normalize(np.cross(forward, as_vector(up, 3)))
        true_up = np.cross(right, forward)

        m = np.eye(4)
        m[:3, 0] = right
        m[:3, 1] = true_up
        m[:3, 2] = -forward
        m[:3, 3] = e

        # Orthonormal basis: the inverse is the transposed rotation
        m_inv = np.eye(4)
        m_inv[:3, :3] = m[:3, :3].T
        m_inv[:3, 3] = -(m_inv[:3, :3] @ e)
        return cls._from_pair(m, m_inv)

    @classmethod
    def perspective(cls, fovy: float, aspect: float, znear: float, zfar: float) -> Transform:
        """OpenGL-style perspective projection (camera -Z maps to NDC z in [-1, 1]).

        Args:
            fovy: Vertical field of view in radians.
            aspect: Width divided by height.
            znear: Distance to the near plane (positive).
            zfar: Distance to the far plane (positive, greater than znear).
        """
        f = 1.0 / math.tan(0.5 * fovy)
        m = np.zeros((4, 4))
        m[0, 0] = f / aspect
        m[1, 1] = f
        m[2, 2] = (zfar + znear) / (znear - zfar)
        m[2, 3] = 2.0 * zfar * znear / (znear - zfar)
        m[3, 2] = -1.0
        return cls._from_pair(m, inverse(m))

    @classmethod
    def orthographic(
        cls,
        left: float,
        right: float,
        bottom: float,
        top: float,
        znear: float,
        zfar: float,
    ) -> Transform:
        """OpenGL-style orthographic projection of the given view box."""
        m = np.eye(4)
        m[0, 0] = 2.0 / (right - left)
        m[1, 1] = 2.0 / (top - bottom)
        m[2, 2] = -2.0 / (zfar - znear)
        m[0, 3] = -(right + left) / (right - left)
        m[1, 3] = -(top + bottom) / (top - bottom)
        m[2, 3] = -(zfar + znear) / (zfar - znear)
        return cls._from_pair(m, inverse(m))

    # =========================================================================
    # Operations
    # =========================================================================

    def inverse(self) -> Transform:
        """The inverse transform (the two matrices swap roles)."""
        return Transform._from_pair(self._inverse, self._matrix)

    def __mul__(self, other: Transform) -> Transform:
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform._from_pair(self._matrix @ other._matrix, other._inverse @ self._inverse)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(np.array_equal(self._matrix, other._matrix))

    def __hash__(self) -> int:
        return hash(self._matrix.tobytes())

    def __repr__(self) -> str:
        rows = ", ".join(str(row.tolist()) for row in self._matrix)
        return f"Transform([{rows}])"

    def point(self, p: Sequence[float]) -> Vector:
        return transform_point(self, p)

    def direction(self, d: Sequence[float]) -> Vector:
        return transform_direction(self, d)

    def normal(self, n: Sequence[float]) -> Vector:
        return transform_normal(self, n)


def _forward_matrix(t: Transform | np.ndarray) -> np.ndarray:
    return t.matrix if isinstance(t, Transform) else np.asarray(t, dtype=np.float64)


def transform_point(t: Transform | np.ndarray, p: Sequence[float]) -> Vector:
    """Apply M to a point, including translation.

    A projective matrix (bottom row other than 0 0 0 1) divides by w.
    """
    m = _forward_matrix(t)
    v = as_vector(p, 3)
    r = m[:3, :3] @ v + m[:3, 3]
    w = float(m[3, :3] @ v + m[3, 3])
    if w != 1.0 and w != 0.0:
        r = r / w
    return r


def transform_direction(t: Transform | np.ndarray, d: Sequence[float]) -> Vector:
    """Apply M to a direction (translation ignored)."""
    m = _forward_matrix(t)
    return m[:3, :3] @ as_vector(d, 3)


def transform_normal(t: Transform | np.ndarray, n: Sequence[float]) -> Vector:
    """Apply the inverse transpose of M to a normal and renormalize.

    Raises:
        SingularMatrixError: If a raw matrix is passed and cannot be inverted.
    """
    if isinstance(t, Transform):
        m_inv = t.inverse_matrix
    else:
        m_inv = inverse(np.asarray(t, dtype=np.float64))
    return normalize(m_inv[:3, :3].T @ as_vector(n, 3))
