"""Scene container: camera, background color and an ordered object list.

Scenes are assembled in Python before rendering and are not mutated while a
render runs. Object order matters: traversal visits objects in insertion
order and an earlier object wins a tie in t.

Example:
    >>> import math
    >>> from lumen.camera.pinhole import Camera
    >>> from lumen.geometry import Sphere
    >>> from lumen.materials import Material
    >>> from lumen.scene import Scene, SceneObject
    >>> camera = Camera.from_look_at((0, 0, 5), (0, 0, 0), (0, 1, 0), math.pi / 3, 1.0)
    >>> scene = Scene(camera, background=(0.1, 0.2, 0.4))
    >>> scene.add_object(SceneObject(Sphere(), Material.lambertian((0.9, 0.1, 0.1))))
    0
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from lumen.geometry.aabb import AABB
from lumen.geometry.hit import Hit
from lumen.linalg.vector import as_vector
from lumen.scene.scene_object import SceneObject

if TYPE_CHECKING:
    from lumen.camera.pinhole import Camera
    from lumen.core.ray import Ray


class Scene:
    """A camera, a background color and the objects to render.

    Attributes:
        camera: The camera primary rays are generated from.
        background: Color (RGB) of rays that escape the scene.
        objects: Objects in insertion order.
    """

    def __init__(self, camera: Camera, background: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        self.camera = camera
        self.background = as_vector(background, 3)
        self.objects: list[SceneObject] = []

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[SceneObject]:
        return iter(self.objects)

    def __repr__(self) -> str:
        return f"Scene(objects={len(self.objects)}, background={self.background.tolist()})"

    def add_object(self, obj: SceneObject) -> int:
        """Append an object and return its index."""
        self.objects.append(obj)
        return len(self.objects) - 1

    def size(self) -> int:
        return len(self.objects)

    def empty(self) -> bool:
        return not self.objects

    def aabb(self) -> AABB:
        """Union of the world boxes of all objects (empty for an empty scene)."""
        box = AABB.empty()
        for obj in self.objects:
            box = box.union(obj.aabb())
        return box

    def trace(self, ray: Ray) -> tuple[SceneObject, Hit] | None:
        """Closest hit of a world-space ray against every object.

        Uploads the objects and runs the same traversal the renderers use.
        Requires ``ti.init()`` to have been called.

        Returns:
            ``(object, hit)`` for the closest hit, or None if the ray misses
            everything.
        """
        from lumen.scene.intersection import trace_objects

        return trace_objects(self.objects, ray, self.background)
