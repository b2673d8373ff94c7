"""Quaternions for representing rotations.

A quaternion is stored as (w, x, y, z) with w the scalar part. Unit
quaternions rotate 3-vectors through the sandwich product ``q v q*``.
Composition follows matrix convention: ``a * b`` applies ``b`` first.

Example:
    >>> import math
    >>> from lumen.linalg.quaternion import Quaternion
    >>> q = Quaternion.from_axis_angle((0.0, 0.0, 1.0), math.pi / 2)
    >>> q.rotate((1.0, 0.0, 0.0)).round(12)
    array([0., 1., 0.])
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from lumen.linalg.vector import Vector, as_vector

# Below this |dot| distance from 1, slerp falls back to normalized lerp
_SLERP_LINEAR_THRESHOLD = 1e-6


@dataclass(frozen=True)
class Quaternion:
    """A quaternion (w, x, y, z). The default value is the identity rotation.

    Attributes:
        w: Scalar part.
        x: First imaginary component.
        y: Second imaginary component.
        z: Third imaginary component.
    """

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> Quaternion:
        return cls()

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> Quaternion:
        """Rotation of ``angle`` radians about ``axis`` (normalized here).

        A zero axis yields the identity rotation.
        """
        a = as_vector(axis, 3)
        length = float(np.linalg.norm(a))
        if length == 0.0:
            return cls()
        a = a / length
        half = 0.5 * angle
        s = math.sin(half)
        return cls(math.cos(half), a[0] * s, a[1] * s, a[2] * s)

    def as_array(self) -> Vector:
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    def __add__(self, other: Quaternion) -> Quaternion:
        return Quaternion(self.w + other.w, self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Quaternion) -> Quaternion:
        return Quaternion(self.w - other.w, self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other: Quaternion | float) -> Quaternion:
        if isinstance(other, Quaternion):
            w1, x1, y1, z1 = self.w, self.x, self.y, self.z
            w2, x2, y2, z2 = other.w, other.x, other.y, other.z
            return Quaternion(
                w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
                w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
                w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
                w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            )
        s = float(other)
        return Quaternion(self.w * s, self.x * s, self.y * s, self.z * s)

    def __rmul__(self, other: float) -> Quaternion:
        return self * float(other)

    def dot(self, other: Quaternion) -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> Quaternion:
        """Unit quaternion in the same direction; the zero quaternion stays zero."""
        n = self.norm()
        if n == 0.0:
            return Quaternion(0.0, 0.0, 0.0, 0.0)
        return self * (1.0 / n)

    def conjugate(self) -> Quaternion:
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def inverse(self) -> Quaternion:
        """Multiplicative inverse (equals the conjugate for unit quaternions).

        Raises:
            ValueError: For the zero quaternion.
        """
        n2 = self.dot(self)
        if n2 == 0.0:
            raise ValueError("The zero quaternion has no inverse")
        return self.conjugate() * (1.0 / n2)

    def rotate(self, v: Sequence[float]) -> Vector:
        """Rotate a 3-vector by this quaternion using ``q * (0, v) * q^-1``."""
        p = as_vector(v, 3)
        r = self * Quaternion(0.0, p[0], p[1], p[2]) * self.conjugate()
        return np.array([r.x, r.y, r.z], dtype=np.float64)

    def to_matrix3(self) -> np.ndarray:
        """3x3 rotation matrix of the (normalized) quaternion."""
        q = self.normalized()
        w, x, y, z = q.w, q.x, q.y, q.z
        return np.array(
            [
                [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
                [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
                [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
            ],
            dtype=np.float64,
        )

    def to_matrix4(self) -> np.ndarray:
        result = np.eye(4, dtype=np.float64)
        result[:3, :3] = self.to_matrix3()
        return result


def slerp(a: Quaternion, b: Quaternion, t: float) -> Quaternion:
    """Spherical linear interpolation along the shortest arc.

    When the endpoints lie in opposite hemispheres (dot < 0) ``b`` is negated,
    since ``b`` and ``-b`` encode the same rotation.
    """
    cos_theta = a.dot(b)
    if cos_theta < 0.0:
        b = -b
        cos_theta = -cos_theta

    if cos_theta > 1.0 - _SLERP_LINEAR_THRESHOLD:
        return (a * (1.0 - t) + b * t).normalized()

    theta = math.acos(min(cos_theta, 1.0))
    sin_theta = math.sin(theta)
    wa = math.sin((1.0 - t) * theta) / sin_theta
    wb = math.sin(t * theta) / sin_theta
    return a * wa + b * wb
