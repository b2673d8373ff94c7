"""Axis-aligned bounding boxes.

The host ``AABB`` class builds and combines boxes during scene assembly.
``hit_aabb`` is the kernel slab test used by scene traversal to reject
objects before transforming the ray into their object space.

An empty box has ``min = +inf`` and ``max = -inf`` so that expanding it by
any point yields a degenerate box around that point. An infinite box
(``-inf``/``+inf``) bounds unbounded primitives such as planes.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.linalg.vector import Vector, as_vector

if TYPE_CHECKING:
    from lumen.core.ray import Ray
    from lumen.linalg.transform import Transform

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Direction components below this magnitude are treated as zero by the slab test
_SLAB_TINY = 1e-30


class AABB:
    """Axis-aligned box with inclusive bounds.

    Attributes:
        min: Lower corner (x, y, z).
        max: Upper corner (x, y, z).
    """

    __slots__ = ("min", "max")

    def __init__(
        self,
        lo: Sequence[float] | None = None,
        hi: Sequence[float] | None = None,
    ) -> None:
        """Create a box from its corners; with no arguments the box is empty."""
        if lo is None and hi is None:
            self.min = np.full(3, np.inf)
            self.max = np.full(3, -np.inf)
        else:
            self.min = as_vector(lo, 3)
            self.max = as_vector(hi if hi is not None else lo, 3)

    @classmethod
    def empty(cls) -> "AABB":
        return cls()

    @classmethod
    def infinite(cls) -> "AABB":
        return cls(np.full(3, -np.inf), np.full(3, np.inf))

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> "AABB":
        box = cls()
        for p in points:
            box.expand(p)
        return box

    def __repr__(self) -> str:
        return f"AABB(min={self.min.tolist()}, max={self.max.tolist()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return bool(np.array_equal(self.min, other.min) and np.array_equal(self.max, other.max))

    __hash__ = None  # mutable

    def copy(self) -> "AABB":
        return AABB(self.min.copy(), self.max.copy())

    def is_empty(self) -> bool:
        return bool(np.any(self.min > self.max))

    def is_finite(self) -> bool:
        """True for a non-empty box with finite corners."""
        return not self.is_empty() and bool(np.all(np.isfinite(self.min)) and np.all(np.isfinite(self.max)))

    def expand(self, point: Sequence[float]) -> "AABB":
        """Grow the box in place to include ``point``; returns self."""
        p = as_vector(point, 3)
        self.min = np.minimum(self.min, p)
        self.max = np.maximum(self.max, p)
        return self

    def union(self, other: "AABB") -> "AABB":
        """Smallest box containing both boxes (a new box)."""
        return AABB(np.minimum(self.min, other.min), np.maximum(self.max, other.max))

    united = union

    def contains(self, item: "AABB | Sequence[float]") -> bool:
        """Test whether a point or another box lies inside (bounds inclusive).

        An empty box is contained in every box.
        """
        if isinstance(item, AABB):
            if item.is_empty():
                return True
            return bool(np.all(item.min >= self.min) and np.all(item.max <= self.max))
        p = as_vector(item, 3)
        return bool(np.all(p >= self.min) and np.all(p <= self.max))

    def overlaps(self, other: "AABB") -> bool:
        if self.is_empty() or other.is_empty():
            return False
        return bool(np.all(self.min <= other.max) and np.all(other.min <= self.max))

    def extent(self) -> Vector:
        """Edge lengths; zero for an empty box."""
        if self.is_empty():
            return np.zeros(3)
        return self.max - self.min

    def center(self) -> Vector:
        return 0.5 * (self.min + self.max)

    def corners(self) -> list[Vector]:
        """The 8 corners, x varying fastest."""
        return [
            np.array(
                [
                    self.max[0] if i & 1 else self.min[0],
                    self.max[1] if i & 2 else self.min[1],
                    self.max[2] if i & 4 else self.min[2],
                ]
            )
            for i in range(8)
        ]

    def transformed(self, transform: "Transform | np.ndarray") -> "AABB":
        """Bounding box of the 8 corners mapped through an affine transform.

        Empty boxes stay empty and boxes with infinite extent stay infinite.
        """
        if self.is_empty():
            return AABB.empty()
        if not self.is_finite():
            return AABB.infinite()
        m = transform.matrix if hasattr(transform, "matrix") else np.asarray(transform, dtype=np.float64)
        pts = np.array(self.corners())
        mapped = pts @ m[:3, :3].T + m[:3, 3]
        return AABB(mapped.min(axis=0), mapped.max(axis=0))

    def intersect(self, ray: "Ray") -> tuple[float, float] | None:
        """Slab test clamped to the ray interval.

        A zero direction component means the ray never leaves its slab on that
        axis, so the origin must already lie inside it.

        Returns:
            ``(t_near, t_far)`` with ``ray.tmin <= t_near <= t_far <= ray.tmax``,
            or None on a miss.
        """
        if self.is_empty():
            return None
        t_near = float(ray.tmin)
        t_far = float(ray.tmax)
        origin = as_vector(ray.origin, 3)
        direction = as_vector(ray.direction, 3)
        for axis in range(3):
            o = origin[axis]
            d = direction[axis]
            if abs(d) < _SLAB_TINY:
                if o < self.min[axis] or o > self.max[axis]:
                    return None
                continue
            inv = 1.0 / d
            t0 = (self.min[axis] - o) * inv
            t1 = (self.max[axis] - o) * inv
            if t0 > t1:
                t0, t1 = t1, t0
            t_near = max(t_near, t0)
            t_far = min(t_far, t1)
            if t_near > t_far:
                return None
        return t_near, t_far


@ti.func
def hit_aabb(
    ray_origin: vec3,
    ray_direction: vec3,
    box_min: vec3,
    box_max: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Kernel slab test of a ray against a box.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        box_min: Lower corner of the box.
        box_max: Upper corner of the box.
        t_min: Start of the ray interval.
        t_max: End of the ray interval.

    Returns:
        A tuple of (hit, t_near, t_far) where hit is 1 when the ray overlaps
        the box inside [t_min, t_max].
    """
    t_near = t_min
    t_far = t_max
    hit = 1
    for axis in ti.static(range(3)):
        o = ray_origin[axis]
        d = ray_direction[axis]
        if ti.abs(d) < 1e-30:
            # Parallel to the slab: origin must be inside
            if o < box_min[axis] or o > box_max[axis]:
                hit = 0
        else:
            inv_d = 1.0 / d
            t0 = (box_min[axis] - o) * inv_d
            t1 = (box_max[axis] - o) * inv_d
            if t0 > t1:
                tmp = t0
                t0 = t1
                t1 = tmp
            t_near = ti.max(t_near, t0)
            t_far = ti.min(t_far, t1)
    if t_near > t_far:
        hit = 0
    return hit, t_near, t_far
