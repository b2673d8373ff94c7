"""Scene module for scene assembly and ray-scene queries.

Components:
    scene_object: A geometry placed in the world with a material
    scene: Scene container (camera, background, ordered objects)
    storage: Structure-of-arrays Taichi fields the kernels read
    intersection: Object and scene traversal kernels
    demo: The two-sphere demo scene

``storage``, ``intersection`` and ``demo`` declare or read Taichi fields and
are not imported here; import them directly after ``ti.init()``.
"""

from .scene import Scene
from .scene_object import SceneObject

__all__ = [
    "Scene",
    "SceneObject",
]
