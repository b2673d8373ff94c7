"""Infinite plane primitive.

A plane is defined by a point on it and a unit normal. It is unbounded, so
its box is infinite and scene traversal skips the box test for it.
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from lumen.geometry.aabb import AABB
from lumen.geometry.hit import PARALLEL_TOLERANCE, Geometry, GeometryKind, HitRecord
from lumen.linalg.vector import as_vector, normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class Plane(Geometry):
    """An infinite plane through ``point`` with unit ``normal``.

    The normal is normalized on construction.

    Raises:
        ValueError: If the normal is the zero vector.
    """

    kind = GeometryKind.PLANE

    def __init__(
        self,
        point: Sequence[float] = (0.0, 0.0, 0.0),
        normal: Sequence[float] = (0.0, 1.0, 0.0),
    ) -> None:
        n = as_vector(normal, 3)
        if not n.any():
            raise ValueError("Plane normal must be non-zero")
        self.point = as_vector(point, 3)
        self.normal = normalize(n)

    def __repr__(self) -> str:
        return f"Plane(point={self.point.tolist()}, normal={self.normal.tolist()})"

    def aabb(self) -> AABB:
        return AABB.infinite()


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    point: vec3,
    normal: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    Solves t = ((point - origin) . n) / (d . n). Rays with
    |d . n| <= 10 * eps * |d| count as parallel and miss. The returned
    normal is the plane normal as stored; it is never flipped toward the ray.

    Texture coordinates are the fractional parts of the hit point's x and z,
    so a checker repeats once per unit square on an xz-aligned plane.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        point: Any point on the plane.
        normal: Unit normal of the plane.
        t_min: Minimum t value for a valid hit (inclusive).
        t_max: Maximum t value for a valid hit (inclusive).

    Returns:
        A HitRecord; check the hit field to determine if intersection occurred.
    """
    denom = tm.dot(ray_direction, normal)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_u = 0.0
    hit_v = 0.0

    if ti.abs(denom) > PARALLEL_TOLERANCE * tm.length(ray_direction):
        t = tm.dot(point - ray_origin, normal) / denom
        if t >= t_min and t <= t_max:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_u = hit_point.x - ti.floor(hit_point.x)
            hit_v = hit_point.z - ti.floor(hit_point.z)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=normal,
        u=hit_u,
        v=hit_v,
    )
