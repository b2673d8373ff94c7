"""Scene-level ray intersection testing.

This module walks the uploaded scene (see ``lumen.scene.storage``) and
returns the closest hit across all objects. For each object, in insertion
order:

1. the ray is tested against the object's world-space box (unbounded
   objects skip this test);
2. the ray is moved into object space: o' = M^-1 [o, 1], d' = M^-1 [d, 0].
   d' is not renormalized, so t along the object-space ray equals t along
   the world ray and the interval needs no rescaling;
3. the geometry is intersected in object space;
4. the hit is lifted back: point by M, normal by (M^-1)^T, then normalized.

A later object replaces the best hit only with a strictly smaller t, so
ties resolve to the earlier object.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.scene.intersection import intersect_scene
    >>> # Use intersect_scene within a Taichi kernel after upload_objects()
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.geometry.aabb import hit_aabb
from lumen.geometry.hit import GeometryKind, Hit, HitRecord, make_miss_record
from lumen.geometry.mesh import hit_triangle
from lumen.geometry.plane import hit_plane
from lumen.geometry.sphere import hit_sphere
from lumen.scene.storage import (
    mesh_first_triangle,
    mesh_triangle_count,
    mesh_triangles,
    mesh_vertices,
    num_objects,
    obj_bounded,
    obj_box_max,
    obj_box_min,
    obj_inverse,
    obj_kind,
    obj_shape,
    obj_world,
    plane_normals,
    plane_points,
    sphere_centers,
    sphere_radii,
    upload_objects,
)

if TYPE_CHECKING:
    from lumen.core.ray import Ray
    from lumen.scene.scene_object import SceneObject

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection in world space.

    Attributes:
        hit: Whether the ray intersected any object (1 if hit, 0 if miss).
        t: Parameter along the world ray. Only valid if hit == 1.
        point: World-space intersection point.
        normal: Unit world-space normal facing the ray origin (the outward
            normal flipped on back-face hits).
        front_face: 1 if the ray hit the outward side, 0 otherwise.
        object_id: Index of the hit object, which is also its material slot.
            -1 on a miss.
        u: First surface parameter.
        v: Second surface parameter.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    object_id: ti.i32
    u: ti.f32
    v: ti.f32


@ti.func
def _make_scene_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        object_id=-1,
        u=0.0,
        v=0.0,
    )


@ti.func
def hit_mesh(
    mesh: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Closest hit over the triangles of an uploaded mesh (linear search)."""
    result = make_miss_record()
    closest_t = t_max
    first = mesh_first_triangle[mesh]
    count = mesh_triangle_count[mesh]
    for tri in range(first, first + count):
        idx = mesh_triangles[tri]
        rec = hit_triangle(
            ray_origin,
            ray_direction,
            mesh_vertices[idx[0]],
            mesh_vertices[idx[1]],
            mesh_vertices[idx[2]],
            t_min,
            closest_t,
        )
        if rec.hit == 1:
            closest_t = rec.t
            result = rec
    return result


@ti.func
def intersect_geometry(
    kind: ti.i32,
    shape: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Dispatch an object-space ray to the intersector of a geometry kind."""
    result = make_miss_record()
    if kind == int(GeometryKind.SPHERE):
        result = hit_sphere(ray_origin, ray_direction, sphere_centers[shape], sphere_radii[shape], t_min, t_max)
    elif kind == int(GeometryKind.PLANE):
        result = hit_plane(ray_origin, ray_direction, plane_points[shape], plane_normals[shape], t_min, t_max)
    elif kind == int(GeometryKind.MESH):
        result = hit_mesh(shape, ray_origin, ray_direction, t_min, t_max)
    return result


@ti.func
def intersect_object(
    index: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Intersect a world-space ray with one uploaded object.

    Args:
        index: Object index in storage.
        ray_origin: World-space ray origin.
        ray_direction: World-space ray direction.
        t_min: Start of the ray interval (world t).
        t_max: End of the ray interval (world t).

    Returns:
        A SceneHitRecord in world space; check its hit field.
    """
    inv = obj_inverse[index]
    o4 = inv @ vec4(ray_origin.x, ray_origin.y, ray_origin.z, 1.0)
    d4 = inv @ vec4(ray_direction.x, ray_direction.y, ray_direction.z, 0.0)
    local_origin = vec3(o4.x, o4.y, o4.z)
    local_direction = vec3(d4.x, d4.y, d4.z)

    rec = intersect_geometry(obj_kind[index], obj_shape[index], local_origin, local_direction, t_min, t_max)

    result = _make_scene_miss_record()
    if rec.hit == 1:
        world = obj_world[index]
        p4 = world @ vec4(rec.point.x, rec.point.y, rec.point.z, 1.0)
        n4 = inv.transpose() @ vec4(rec.normal.x, rec.normal.y, rec.normal.z, 0.0)
        outward = tm.normalize(vec3(n4.x, n4.y, n4.z))

        front_face = 1
        facing = outward
        if tm.dot(ray_direction, outward) > 0.0:
            front_face = 0
            facing = -outward

        result = SceneHitRecord(
            hit=1,
            t=rec.t,
            point=vec3(p4.x, p4.y, p4.z),
            normal=facing,
            front_face=front_face,
            object_id=index,
            u=rec.u,
            v=rec.v,
        )
    return result


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Test a ray against all uploaded objects and keep the closest hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = t_max
    result = _make_scene_miss_record()

    n = num_objects[None]
    for i in range(n):
        candidate = 1
        if obj_bounded[i] == 1:
            box_hit, _, _ = hit_aabb(ray_origin, ray_direction, obj_box_min[i], obj_box_max[i], t_min, closest_t)
            candidate = box_hit
        if candidate == 1:
            rec = intersect_object(i, ray_origin, ray_direction, t_min, closest_t)
            if rec.hit == 1 and (result.hit == 0 or rec.t < closest_t):
                closest_t = rec.t
                result = rec

    return result


# =============================================================================
# Host-side Queries
# =============================================================================

_result_hit = ti.field(dtype=ti.i32, shape=())
_result_t = ti.field(dtype=ti.f32, shape=())
_result_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_result_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_result_front_face = ti.field(dtype=ti.i32, shape=())
_result_object = ti.field(dtype=ti.i32, shape=())
_result_uv = ti.Vector.field(2, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
):
    # Outermost loops run in parallel; this keeps the traversal loop serial
    for _ in range(1):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), t_min, t_max)
        _result_hit[None] = rec.hit
        _result_t[None] = rec.t
        _result_point[None] = rec.point
        _result_normal[None] = rec.normal
        _result_front_face[None] = rec.front_face
        _result_object[None] = rec.object_id
        _result_uv[None] = ti.Vector([rec.u, rec.v])


def trace_uploaded(ray: "Ray") -> tuple[int, Hit] | None:
    """Trace one ray against whatever is currently uploaded.

    Returns:
        ``(object_index, hit)`` with the outward world normal, or None.
    """
    o = ray.origin
    d = ray.direction
    _trace_single_ray(
        float(o[0]), float(o[1]), float(o[2]),
        float(d[0]), float(d[1]), float(d[2]),
        float(ray.tmin), float(ray.tmax),
    )
    if _result_hit[None] == 0:
        return None

    front_face = bool(_result_front_face[None])
    normal = np.array(_result_normal[None].to_numpy(), dtype=np.float64)
    if not front_face:
        normal = -normal
    uv = _result_uv[None]
    hit = Hit(
        t=float(_result_t[None]),
        point=np.array(_result_point[None].to_numpy(), dtype=np.float64),
        normal=normal,
        u=float(uv[0]),
        v=float(uv[1]),
        front_face=front_face,
    )
    return int(_result_object[None]), hit


def trace_objects(
    objects: "Sequence[SceneObject]",
    ray: "Ray",
    background: Sequence[float] = (0.0, 0.0, 0.0),
) -> "tuple[SceneObject, Hit] | None":
    """Upload ``objects`` and return the closest ``(object, hit)`` for ``ray``, or None."""
    upload_objects(objects, background)
    result = trace_uploaded(ray)
    if result is None:
        return None
    index, hit = result
    return objects[index], hit
