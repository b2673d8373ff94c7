"""Hit records shared by all geometric primitives.

Two representations exist side by side:

- ``HitRecord`` is a Taichi dataclass returned by the kernel intersectors
  (``hit_sphere``, ``hit_plane``, ``hit_triangle``). Its fields are only
  meaningful when ``hit == 1``.
- ``Hit`` is the host-side result handed back to Python callers by
  ``Geometry.intersect``, ``SceneObject.intersect`` and ``Scene.trace``.

Normals produced by the intersectors are unit length and point outward in
object space. Orientation relative to the ray (``front_face``) is decided by
the scene layer after lifting the normal to world space.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

if TYPE_CHECKING:
    from lumen.core.ray import Ray
    from lumen.geometry.aabb import AABB

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Machine epsilon of the kernel scalar type (float32)
EPSILON = 1.1920929e-7

# Parallel-ray rejection threshold for planes and triangles
PARALLEL_TOLERANCE = 10.0 * EPSILON


class GeometryKind(IntEnum):
    """Closed set of primitive kinds, dispatched on inside kernels."""

    SPHERE = 0
    PLANE = 1
    MESH = 2


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection in object space.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: Ray parameter of the intersection, in units of the ray direction.
        point: Intersection point.
        normal: Outward unit normal at the intersection point.
        u: First surface parameter (texture coordinate).
        v: Second surface parameter (texture coordinate).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    u: ti.f32
    v: ti.f32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        u=0.0,
        v=0.0,
    )


@dataclass
class Hit:
    """A world-space intersection returned to Python code.

    Attributes:
        t: Ray parameter along the original (world-space) ray.
        point: Intersection point in world space.
        normal: Outward unit normal in world space.
        u: First surface parameter.
        v: Second surface parameter.
        front_face: True when the ray arrived from the outward side.
    """

    t: float
    point: np.ndarray
    normal: np.ndarray
    u: float = 0.0
    v: float = 0.0
    front_face: bool = True


class Geometry:
    """Base class of the host-side primitives.

    Subclasses set ``kind`` and implement ``aabb()``. Instances are shared by
    reference between scene objects; scene uploads deduplicate them by
    identity, so they compare by identity as well.
    """

    kind: GeometryKind

    def aabb(self) -> "AABB":
        raise NotImplementedError

    def intersect(self, ray: "Ray") -> "Hit | None":
        """Intersect a ray with this primitive placed at the origin (identity transform).

        Runs the same kernel intersector the renderers use. Requires
        ``ti.init()`` to have been called.

        Returns:
            The closest hit within ``[ray.tmin, ray.tmax]``, or None on a miss.
        """
        from lumen.scene.scene_object import SceneObject

        return SceneObject(self).intersect(ray)
