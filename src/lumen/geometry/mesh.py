"""Triangle meshes and the Moller-Trumbore triangle intersector.

``Mesh`` is an indexed triangle list assembled on the host. At upload time
its vertices and triangles are appended to the scene's shared vertex and
triangle fields; the kernel then walks the mesh's triangle range and keeps
the closest hit (see ``lumen.scene.intersection``). Each face is independent
and shading uses the geometric normal.
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.geometry.aabb import AABB
from lumen.geometry.hit import PARALLEL_TOLERANCE, Geometry, GeometryKind, HitRecord
from lumen.linalg.vector import as_vector

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class Mesh(Geometry):
    """An indexed triangle mesh.

    The bounding box is maintained incrementally as vertices are added, so
    an empty mesh has an empty box.
    """

    kind = GeometryKind.MESH

    def __init__(self) -> None:
        self._vertices: list[np.ndarray] = []
        self._triangles: list[tuple[int, int, int]] = []
        self._box = AABB.empty()

    def __repr__(self) -> str:
        return f"Mesh(vertices={self.vertex_count}, triangles={self.triangle_count})"

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def triangle_count(self) -> int:
        return len(self._triangles)

    @property
    def vertices(self) -> np.ndarray:
        """Vertex positions as an (N, 3) float64 array."""
        if not self._vertices:
            return np.zeros((0, 3))
        return np.array(self._vertices)

    @property
    def triangles(self) -> np.ndarray:
        """Vertex indices as an (M, 3) int32 array."""
        if not self._triangles:
            return np.zeros((0, 3), dtype=np.int32)
        return np.array(self._triangles, dtype=np.int32)

    def add_vertex(self, position: Sequence[float]) -> int:
        """Append a vertex and return its index."""
        p = as_vector(position, 3)
        self._vertices.append(p)
        self._box.expand(p)
        return len(self._vertices) - 1

    def add_triangle(self, i: int, j: int, k: int) -> int:
        """Append a triangle over existing vertices and return its index.

        Raises:
            IndexError: If any index does not name an existing vertex.
        """
        count = len(self._vertices)
        for index in (i, j, k):
            if not 0 <= index < count:
                raise IndexError(f"Vertex index {index} out of range for a mesh with {count} vertices")
        self._triangles.append((int(i), int(j), int(k)))
        return len(self._triangles) - 1

    def aabb(self) -> AABB:
        return self._box.copy()


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    p0: vec3,
    p1: vec3,
    p2: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Moller-Trumbore ray-triangle intersection.

    With e1 = p1 - p0, e2 = p2 - p0 and h = d x e2, the determinant
    a = e1 . h is rejected when |a| <= 10 * eps (parallel or degenerate
    triangle). Barycentrics u and v must satisfy u, v >= 0 and u + v <= 1.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        p0: First vertex.
        p1: Second vertex.
        p2: Third vertex.
        t_min: Minimum t value for a valid hit (inclusive).
        t_max: Maximum t value for a valid hit (inclusive).

    Returns:
        A HitRecord carrying the barycentric (u, v) and the geometric normal
        normalize(e1 x e2).
    """
    e1 = p1 - p0
    e2 = p2 - p0
    h = tm.cross(ray_direction, e2)
    a = tm.dot(e1, h)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_u = 0.0
    hit_v = 0.0

    if ti.abs(a) > PARALLEL_TOLERANCE:
        f = 1.0 / a
        s = ray_origin - p0
        u = f * tm.dot(s, h)
        if u >= 0.0 and u <= 1.0:
            q = tm.cross(s, e1)
            v = f * tm.dot(ray_direction, q)
            if v >= 0.0 and u + v <= 1.0:
                t = f * tm.dot(e2, q)
                if t >= t_min and t <= t_max:
                    did_hit = 1
                    hit_t = t
                    hit_point = ray_origin + t * ray_direction
                    hit_normal = tm.normalize(tm.cross(e1, e2))
                    hit_u = u
                    hit_v = v

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        u=hit_u,
        v=hit_v,
    )
