"""Scene objects: a shared geometry placed with a material and a transform."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lumen.geometry.aabb import AABB
from lumen.geometry.hit import Geometry, Hit
from lumen.linalg.transform import Transform
from lumen.materials.material import Material

if TYPE_CHECKING:
    from lumen.core.ray import Ray


@dataclass(eq=False)
class SceneObject:
    """A geometry instance in the world.

    The geometry is held by reference, so many objects may share one mesh or
    sphere under different transforms and materials. Objects compare by
    identity.

    Attributes:
        geometry: The shape, defined in object space.
        material: Surface material (defaults to the black generic material).
        transform: Object-to-world transform (defaults to identity).
    """

    geometry: Geometry
    material: Material = field(default_factory=Material)
    transform: Transform = field(default_factory=Transform)

    def aabb(self) -> AABB:
        """World-space box: the 8 transformed corners of the object-space box."""
        return self.geometry.aabb().transformed(self.transform)

    def intersect(self, ray: Ray) -> Hit | None:
        """Intersect a world-space ray with this object alone.

        The ray is moved into object space with the inverse transform, the
        geometry is intersected there and the hit is lifted back: the point by
        the world matrix, the normal by its inverse transpose. The reported t
        is the parameter along the original world ray.

        Requires ``ti.init()`` to have been called.

        Returns:
            The closest hit within ``[ray.tmin, ray.tmax]``, or None.
        """
        from lumen.scene.intersection import trace_objects

        result = trace_objects([self], ray)
        if result is None:
            return None
        return result[1]
