"""Geometry module for ray-primitive intersection.

This module implements the geometric primitives and their intersectors:

Components:
    hit: GeometryKind, the host Hit and the kernel HitRecord
    aabb: Axis-aligned bounding boxes and the slab test
    sphere: Sphere with robust quadratic intersection
    plane: Infinite plane
    mesh: Indexed triangle mesh and Moller-Trumbore intersection

Each primitive pairs a host class (used during scene assembly) with a
Taichi function (used inside render kernels). Intersectors work in object
space and return outward unit normals.
"""

from .aabb import AABB, hit_aabb
from .hit import Geometry, GeometryKind, Hit, HitRecord, make_miss_record
from .mesh import Mesh, hit_triangle
from .plane import Plane, hit_plane
from .sphere import Sphere, hit_sphere

__all__ = [
    "AABB",
    "Geometry",
    "GeometryKind",
    "Hit",
    "HitRecord",
    "Mesh",
    "Plane",
    "Sphere",
    "hit_aabb",
    "hit_plane",
    "hit_sphere",
    "hit_triangle",
    "make_miss_record",
]
