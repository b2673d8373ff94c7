"""Structure-of-arrays scene storage for render kernels.

Kernels cannot walk Python objects, so before every render (or host-side
trace) the scene is flattened into preallocated Taichi fields:

- per object: geometry kind and shape index, world and inverse matrices,
  world-space bounding box, and its material;
- per shape: sphere centers/radii, plane points/normals, and mesh triangle
  ranges into shared vertex and triangle arrays.

Geometry shared between objects is uploaded once (deduplicated by
identity). The fields keep their capacity across uploads; the active counts
are stored alongside them. Nothing here is written while a render kernel
runs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.scene.storage import upload_objects, get_object_count
    >>> upload_objects(scene.objects, scene.background)
    >>> get_object_count()
    2
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.camera.pinhole import setup_camera
from lumen.geometry.hit import GeometryKind
from lumen.materials.material import Checkerboard, Material, SolidColor

if TYPE_CHECKING:
    from lumen.scene.scene import Scene
    from lumen.scene.scene_object import SceneObject

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Capacities of the preallocated fields
MAX_OBJECTS = 1024
MAX_SPHERES = 1024
MAX_PLANES = 256
MAX_MESHES = 256
MAX_VERTICES = 1 << 18
MAX_TRIANGLES = 1 << 18

# =============================================================================
# Object Storage
# =============================================================================

obj_kind = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
obj_shape = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
obj_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_OBJECTS)
obj_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_OBJECTS)
# 0 for unbounded objects (planes), which skip the box test
obj_bounded = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
obj_box_min = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
obj_box_max = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# =============================================================================
# Shape Storage
# =============================================================================

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)

plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)

mesh_first_triangle = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_triangle_count = ti.field(dtype=ti.i32, shape=MAX_MESHES)
# Triangle indices are absolute into mesh_vertices
mesh_vertices = ti.Vector.field(3, dtype=ti.f32, shape=MAX_VERTICES)
mesh_triangles = ti.Vector.field(3, dtype=ti.i32, shape=MAX_TRIANGLES)

# =============================================================================
# Material Storage (one slot per object)
# =============================================================================

material_kind = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
material_albedo = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
material_roughness = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
material_transparency = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
material_radiance = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
material_emission_power = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
# 1 when the albedo comes from the checkerboard parameters below
material_textured = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
material_checker_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
material_checker_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
material_tiles = ti.Vector.field(2, dtype=ti.f32, shape=MAX_OBJECTS)

background_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_storage() -> None:
    """Remove every object and reset the background to black.

    The field data is not cleared; it is overwritten by the next upload.
    """
    num_objects[None] = 0
    background_color[None] = [0.0, 0.0, 0.0]


def get_object_count() -> int:
    """Get the number of uploaded objects."""
    return int(num_objects[None])


def _check_capacity(count: int, capacity: int, what: str) -> None:
    if count > capacity:
        raise RuntimeError(f"Maximum number of {what} ({capacity}) exceeded")


class _ShapeTable:
    """Host staging arrays for the shape fields, deduplicated by identity."""

    def __init__(self) -> None:
        self.index_of: dict[int, int] = {}
        self.sphere_centers: list[np.ndarray] = []
        self.sphere_radii: list[float] = []
        self.plane_points: list[np.ndarray] = []
        self.plane_normals: list[np.ndarray] = []
        self.mesh_first: list[int] = []
        self.mesh_count: list[int] = []
        self.vertices: list[np.ndarray] = []
        self.triangles: list[np.ndarray] = []
        self.vertex_total = 0
        self.triangle_total = 0

    def add(self, geometry) -> int:
        key = id(geometry)
        if key in self.index_of:
            return self.index_of[key]

        kind = geometry.kind
        if kind == GeometryKind.SPHERE:
            index = len(self.sphere_radii)
            _check_capacity(index + 1, MAX_SPHERES, "spheres")
            self.sphere_centers.append(geometry.center)
            self.sphere_radii.append(geometry.radius)
        elif kind == GeometryKind.PLANE:
            index = len(self.plane_points)
            _check_capacity(index + 1, MAX_PLANES, "planes")
            self.plane_points.append(geometry.point)
            self.plane_normals.append(geometry.normal)
        elif kind == GeometryKind.MESH:
            index = len(self.mesh_first)
            _check_capacity(index + 1, MAX_MESHES, "meshes")
            vertices = geometry.vertices
            triangles = geometry.triangles
            _check_capacity(self.vertex_total + len(vertices), MAX_VERTICES, "vertices")
            _check_capacity(self.triangle_total + len(triangles), MAX_TRIANGLES, "triangles")
            self.mesh_first.append(self.triangle_total)
            self.mesh_count.append(len(triangles))
            self.vertices.append(vertices)
            self.triangles.append(triangles + self.vertex_total)
            self.vertex_total += len(vertices)
            self.triangle_total += len(triangles)
        else:
            raise TypeError(f"Unsupported geometry kind: {kind!r}")

        self.index_of[key] = index
        return index


def _padded(rows: list, capacity: int, width: int, dtype=np.float32) -> np.ndarray:
    """Stack rows into a full-capacity array, zero-padded past the active count."""
    out = np.zeros((capacity, width) if width > 1 else capacity, dtype=dtype)
    if rows:
        data = np.asarray(rows if width == 1 else np.vstack(rows), dtype=dtype)
        out[: len(data)] = data
    return out


def _material_params(material: Material) -> tuple:
    """Flatten a material into (kind, albedo, textured, checker_a, checker_b, tiles)."""
    albedo = material.albedo
    textured = 0
    checker_a = (0.0, 0.0, 0.0)
    checker_b = (0.0, 0.0, 0.0)
    tiles = (1.0, 1.0)
    prop = material.albedo_property
    if isinstance(prop, Checkerboard):
        textured = 1
        checker_a = prop.color_a
        checker_b = prop.color_b
        tiles = (float(prop.tiles_u), float(prop.tiles_v))
    elif isinstance(prop, SolidColor):
        albedo = prop.color
    elif prop is not None:
        raise TypeError(f"Albedo property {type(prop).__name__} cannot be evaluated in render kernels")
    return int(material.kind), albedo, textured, checker_a, checker_b, tiles


def upload_objects(objects: Sequence[SceneObject], background: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
    """Flatten scene objects into the storage fields.

    Args:
        objects: Objects in insertion order; their index is their identity in
            kernels (ties in t resolve to the lower index).
        background: Color returned by rays that miss everything.

    Raises:
        RuntimeError: If any capacity is exceeded.
        TypeError: If a material carries an albedo property that kernels
            cannot evaluate.
    """
    count = len(objects)
    _check_capacity(count, MAX_OBJECTS, "objects")

    shapes = _ShapeTable()
    kinds = np.zeros(MAX_OBJECTS, dtype=np.int32)
    shape_ids = np.zeros(MAX_OBJECTS, dtype=np.int32)
    worlds = np.zeros((MAX_OBJECTS, 4, 4), dtype=np.float32)
    inverses = np.zeros((MAX_OBJECTS, 4, 4), dtype=np.float32)
    bounded = np.zeros(MAX_OBJECTS, dtype=np.int32)
    box_min = np.zeros((MAX_OBJECTS, 3), dtype=np.float32)
    box_max = np.zeros((MAX_OBJECTS, 3), dtype=np.float32)

    mat_kind = np.zeros(MAX_OBJECTS, dtype=np.int32)
    mat_albedo = np.zeros((MAX_OBJECTS, 3), dtype=np.float32)
    mat_roughness = np.zeros(MAX_OBJECTS, dtype=np.float32)
    mat_transparency = np.zeros(MAX_OBJECTS, dtype=np.float32)
    mat_radiance = np.zeros((MAX_OBJECTS, 3), dtype=np.float32)
    mat_power = np.zeros(MAX_OBJECTS, dtype=np.float32)
    mat_textured = np.zeros(MAX_OBJECTS, dtype=np.int32)
    mat_checker_a = np.zeros((MAX_OBJECTS, 3), dtype=np.float32)
    mat_checker_b = np.zeros((MAX_OBJECTS, 3), dtype=np.float32)
    mat_tiles = np.ones((MAX_OBJECTS, 2), dtype=np.float32)

    for i, obj in enumerate(objects):
        kinds[i] = int(obj.geometry.kind)
        shape_ids[i] = shapes.add(obj.geometry)
        worlds[i] = obj.transform.matrix
        inverses[i] = obj.transform.inverse_matrix

        box = obj.aabb()
        if box.is_finite():
            bounded[i] = 1
            box_min[i] = box.min
            box_max[i] = box.max

        material = obj.material
        kind, albedo, textured, checker_a, checker_b, tiles = _material_params(material)
        mat_kind[i] = kind
        mat_albedo[i] = albedo
        mat_roughness[i] = material.roughness
        mat_transparency[i] = material.transparency
        mat_radiance[i] = material.radiance
        mat_power[i] = material.emission_power
        mat_textured[i] = textured
        mat_checker_a[i] = checker_a
        mat_checker_b[i] = checker_b
        mat_tiles[i] = tiles

    obj_kind.from_numpy(kinds)
    obj_shape.from_numpy(shape_ids)
    obj_world.from_numpy(worlds)
    obj_inverse.from_numpy(inverses)
    obj_bounded.from_numpy(bounded)
    obj_box_min.from_numpy(box_min)
    obj_box_max.from_numpy(box_max)

    sphere_centers.from_numpy(_padded(shapes.sphere_centers, MAX_SPHERES, 3))
    sphere_radii.from_numpy(_padded(shapes.sphere_radii, MAX_SPHERES, 1))
    plane_points.from_numpy(_padded(shapes.plane_points, MAX_PLANES, 3))
    plane_normals.from_numpy(_padded(shapes.plane_normals, MAX_PLANES, 3))
    mesh_first_triangle.from_numpy(_padded(shapes.mesh_first, MAX_MESHES, 1, np.int32))
    mesh_triangle_count.from_numpy(_padded(shapes.mesh_count, MAX_MESHES, 1, np.int32))
    if shapes.vertex_total:
        mesh_vertices.from_numpy(_padded(shapes.vertices, MAX_VERTICES, 3))
    if shapes.triangle_total:
        mesh_triangles.from_numpy(_padded(shapes.triangles, MAX_TRIANGLES, 3, np.int32))

    material_kind.from_numpy(mat_kind)
    material_albedo.from_numpy(mat_albedo)
    material_roughness.from_numpy(mat_roughness)
    material_transparency.from_numpy(mat_transparency)
    material_radiance.from_numpy(mat_radiance)
    material_emission_power.from_numpy(mat_power)
    material_textured.from_numpy(mat_textured)
    material_checker_a.from_numpy(mat_checker_a)
    material_checker_b.from_numpy(mat_checker_b)
    material_tiles.from_numpy(mat_tiles)

    background_color[None] = [float(c) for c in background]
    num_objects[None] = count

    logger.debug(
        "Uploaded %d objects (%d spheres, %d planes, %d meshes, %d triangles)",
        count,
        len(shapes.sphere_radii),
        len(shapes.plane_points),
        len(shapes.mesh_first),
        shapes.triangle_total,
    )


def upload_scene(scene: Scene) -> None:
    """Upload a scene's objects, background and camera."""
    upload_objects(scene.objects, scene.background)
    setup_camera(scene.camera)
