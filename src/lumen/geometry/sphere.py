"""Sphere primitive with robust ray-sphere intersection.

This module provides the host-side ``Sphere`` geometry and the kernel
intersector ``hit_sphere``. The intersector uses the robust quadratic
formula from Ray Tracing Gems to avoid catastrophic cancellation when
h^2 is nearly equal to a*c.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.core.ray import Ray
    >>> from lumen.geometry.sphere import Sphere
    >>> hit = Sphere((0.0, 0.0, 0.0), 1.0).intersect(Ray((0, 0, 3), (0, 0, -1)))
    >>> round(hit.t, 5)
    2.0
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from lumen.geometry.aabb import AABB
from lumen.geometry.hit import EPSILON, Geometry, GeometryKind, HitRecord
from lumen.linalg.vector import as_vector

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class Sphere(Geometry):
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
    """

    kind = GeometryKind.SPHERE

    def __init__(self, center: Sequence[float] = (0.0, 0.0, 0.0), radius: float = 1.0) -> None:
        self.center = as_vector(center, 3)
        self.radius = float(radius)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius})"

    def aabb(self) -> AABB:
        r = abs(self.radius)
        return AABB(self.center - r, self.center + r)


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 with the numerically stable formula.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-10:
        # Tangent ray through the origin of the quadratic: fall back to the textbook form
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        tmp = t0
        t0 = t1
        t1 = tmp

    return t0, t1


@ti.func
def sphere_uv(outward_normal: vec3):
    """Spherical (u, v) of a point on the unit sphere.

    u wraps around the y axis starting at -x; v runs from the south pole (0)
    to the north pole (1).
    """
    u = 0.5 + tm.atan2(-outward_normal.z, outward_normal.x) / (2.0 * tm.pi)
    v = 0.5 + ti.asin(tm.clamp(outward_normal.y, -1.0, 1.0)) / tm.pi
    return u, v


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection using the robust quadratic formula.

    The ray-sphere intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    which expands to a*t^2 + 2*h*t + c = 0 with
        a = dot(direction, direction)
        h = dot(direction, oc)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    The smaller root inside [t_min, t_max] wins; from inside the sphere that
    is the far root. The normal always points away from the center. A
    discriminant that rounding pushed slightly below zero is treated as a
    tangent hit at the double root.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        center: Center of the sphere.
        radius: Radius of the sphere.
        t_min: Minimum t value for a valid hit (inclusive).
        t_max: Maximum t value for a valid hit (inclusive).

    Returns:
        A HitRecord; check the hit field to determine if intersection occurred.
    """
    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = h * h - a * c

    # Absorb rounding noise around the tangent case
    tangent_slack = 4.0 * EPSILON * ti.max(h * h, ti.abs(a * c))
    if discriminant < 0.0 and discriminant >= -tangent_slack:
        discriminant = 0.0

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_u = 0.0
    hit_v = 0.0

    if discriminant >= 0.0 and a > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = t >= t_min and t <= t_max
        if not valid:
            t = t1
            valid = t >= t_min and t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = tm.normalize((hit_point - center) / radius)
            hit_u, hit_v = sphere_uv(hit_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        u=hit_u,
        v=hit_v,
    )
