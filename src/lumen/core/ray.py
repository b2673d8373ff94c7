"""Ray data structure and vector utilities.

This module provides the host-side ``Ray`` used when querying scenes from
Python, together with the vector helpers that the kernel code shares
(reflection, refraction, Fresnel and orthonormal bases).

A ray is ``origin + t * direction`` restricted to ``[tmin, tmax]``. The
direction is not required to be normalized, and t is measured in units of
the direction.

Example:
    >>> from lumen.core.ray import Ray
    >>> ray = Ray((1.0, 2.0, 3.0), (0.0, 0.0, 1.0))
    >>> ray.at(5.0)
    array([1., 2., 8.])
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.linalg.vector import Vector, as_vector

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass
class Ray:
    """A ray with an origin, a direction and a parameter interval.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector; need not be unit length.
        tmin: Start of the valid parameter interval (>= 0).
        tmax: End of the valid parameter interval.
    """

    origin: Vector
    direction: Vector
    tmin: float = 0.0
    tmax: float = math.inf

    def __post_init__(self) -> None:
        self.origin = as_vector(self.origin, 3)
        self.direction = as_vector(self.direction, 3)
        self.tmin = float(self.tmin)
        self.tmax = float(self.tmax)

    def at(self, t: float) -> Vector:
        """The point ``origin + t * direction``."""
        return self.origin + t * self.direction

    def is_valid(self) -> bool:
        """True when the interval is non-empty and the direction is non-zero."""
        return self.tmax > self.tmin and bool(np.any(self.direction != 0.0))

    def normalized_dir(self) -> "Ray":
        """A copy with a unit direction; the interval is kept as is."""
        length = float(np.linalg.norm(self.direction))
        direction = self.direction / length if length > 0.0 else self.direction.copy()
        return replace(self, origin=self.origin.copy(), direction=direction)


def make_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    tmin: float = 0.0,
    tmax: float = math.inf,
) -> Ray:
    return Ray(as_vector(origin, 3), as_vector(direction, 3), tmin, tmax)


# =============================================================================
# Vector Utility Functions (kernel side)
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector, mapping the zero vector to itself."""
    len_sq = tm.dot(v, v)
    result = vec3(0.0, 0.0, 0.0)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal facing the incident ray (normalized).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector, or the zero vector under total
        internal reflection.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        result = eta * incident + (eta * cos_i - cos_t) * normal
    return result


@ti.func
def schlick_fresnel(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Fresnel reflectance by Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        R0 + (1 - R0)(1 - cos)^5 with R0 = ((1 - ref_idx) / (1 + ref_idx))^2.
    """
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 if all components are below 1e-8 in magnitude, 0 otherwise."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis with ``normal`` as the z axis.

    Returns:
        A tuple (tangent, bitangent, normal).
    """
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    tangent = tm.normalize(tm.cross(a, normal))
    bitangent = tm.cross(normal, tangent)
    return tangent, bitangent, normal


@ti.func
def local_to_world(local_dir: vec3, tangent: vec3, bitangent: vec3, normal: vec3) -> vec3:
    """Transform a direction from a local z-up frame to world coordinates."""
    return local_dir.x * tangent + local_dir.y * bitangent + local_dir.z * normal
