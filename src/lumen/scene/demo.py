"""Two-sphere demo scene rendered by the ``lumen-render`` command.

The scene consists of:
- One unit sphere geometry shared by two objects
- Left sphere at x = -1.25: red diffuse
- Right sphere at x = +1.25: green metal with roughness 0.1
- Sky-blue background
- Camera at (0, 0, 5) looking at the origin with a 60 degree vertical field of view

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.scene.demo import create_demo_scene
    >>> scene = create_demo_scene(1920, 1080)
    >>> len(scene)
    2
"""

import math
from dataclasses import dataclass

from lumen.camera.pinhole import Camera
from lumen.geometry.sphere import Sphere
from lumen.linalg.quaternion import Quaternion
from lumen.linalg.transform import Transform
from lumen.materials.material import Material
from lumen.scene.scene import Scene
from lumen.scene.scene_object import SceneObject


@dataclass
class DemoSceneParams:
    """Parameters of the demo scene.

    Attributes:
        background: Sky color returned by escaping rays.
        left_albedo: Albedo of the diffuse sphere.
        right_albedo: Albedo of the metal sphere.
        right_roughness: Roughness of the metal sphere.
        separation: Distance of each sphere center from the origin along x.
    """

    background: tuple[float, float, float] = (0.1, 0.2, 0.4)
    left_albedo: tuple[float, float, float] = (0.9, 0.1, 0.1)
    right_albedo: tuple[float, float, float] = (0.1, 0.9, 0.1)
    right_roughness: float = 0.1
    separation: float = 1.25


def create_demo_scene(width: int, height: int, params: DemoSceneParams | None = None) -> Scene:
    """Create the demo scene with a camera matching the image aspect ratio.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        params: Optional scene parameters. Uses defaults if None.

    Returns:
        The assembled scene.
    """
    if params is None:
        params = DemoSceneParams()

    camera = Camera.from_look_at(
        eye=(0.0, 0.0, 5.0),
        target=(0.0, 0.0, 0.0),
        up=(0.0, 1.0, 0.0),
        fovy=math.pi / 3.0,
        aspect=width / height,
        znear=0.1,
        zfar=100.0,
    )
    scene = Scene(camera, background=params.background)

    sphere = Sphere((0.0, 0.0, 0.0), 1.0)
    left = Transform.from_trs((-params.separation, 0.0, 0.0), Quaternion(), (1.0, 1.0, 1.0))
    right = Transform.from_trs((params.separation, 0.0, 0.0), Quaternion(), (1.0, 1.0, 1.0))

    scene.add_object(SceneObject(sphere, Material.lambertian(params.left_albedo), left))
    scene.add_object(SceneObject(sphere, Material.metal(params.right_albedo, params.right_roughness), right))
    return scene
