"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates primary rays for
rendering. The camera is described by a camera-to-world transform (the
camera looks along its local -Z with +Y up) and OpenGL-style projection
parameters.

A primary ray through pixel (px, py) of a W x H image uses the pixel center:

    ndc_x = (2 * (px + 0.5) / W - 1) * aspect * tan(fovy / 2)
    ndc_y = (1 - 2 * (py + 0.5) / H) * tan(fovy / 2)
    d_cam = normalize(ndc_x, ndc_y, -1)

and lifts ``d_cam`` to world space with the camera transform. Pixel (0, 0)
is the top-left corner of the image. The path tracer replaces the 0.5 offset
by a random jitter in [0, 1) for anti-aliasing.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.camera.pinhole import Camera, setup_camera, get_camera_ray
    >>>
    >>> camera = Camera.from_look_at(
    ...     eye=(0.0, 0.0, 5.0), target=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0),
    ...     fovy=math.pi / 3, aspect=16.0 / 9.0,
    ... )
    >>> ray = camera.generate_ray(960, 540, 1920, 1080)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     origin, direction = get_camera_ray(4.5, 4.5, 9, 9)
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.core.ray import Ray
from lumen.linalg.transform import Transform, transform_direction

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """A pinhole (perspective) camera.

    Attributes:
        transform: Camera-to-world transform.
        fovy: Vertical field of view in radians.
        aspect: Width divided by height of the image plane.
        znear: Near clipping distance (projection matrix only).
        zfar: Far clipping distance (projection matrix only).
    """

    transform: Transform = field(default_factory=Transform)
    fovy: float = math.pi / 3.0
    aspect: float = 1.0
    znear: float = 0.1
    zfar: float = 1000.0

    @classmethod
    def from_look_at(
        cls,
        eye: Sequence[float],
        target: Sequence[float],
        up: Sequence[float],
        fovy: float,
        aspect: float,
        znear: float = 0.1,
        zfar: float = 1000.0,
    ) -> "Camera":
        """Camera at ``eye`` looking toward ``target``.

        The camera basis is (right, true_up, -forward) with
        forward = normalize(target - eye), right = normalize(forward x up)
        and true_up = right x forward.
        """
        return cls(Transform.look_at(eye, target, up), fovy, aspect, znear, zfar)

    @property
    def eye(self) -> np.ndarray:
        """Camera position in world space."""
        return np.array(self.transform.matrix[:3, 3])

    def view_matrix(self) -> np.ndarray:
        """World-to-camera matrix (the inverse of the camera transform)."""
        return np.array(self.transform.inverse_matrix)

    def projection_matrix(self) -> np.ndarray:
        """OpenGL-style perspective projection; P[3, 2] = -1."""
        return np.array(Transform.perspective(self.fovy, self.aspect, self.znear, self.zfar).matrix)

    def viewproj_matrix(self) -> np.ndarray:
        """Projection composed with view: P . V."""
        return self.projection_matrix() @ self.view_matrix()

    def generate_ray(self, px: float, py: float, width: int, height: int) -> Ray:
        """Primary ray through the center of pixel (px, py).

        Args:
            px: Pixel column, 0 at the left edge.
            py: Pixel row, 0 at the top edge.
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            A Ray from the eye with tmin 0 and tmax +inf.
        """
        tan_half = math.tan(0.5 * self.fovy)
        ndc_x = (2.0 * (px + 0.5) / width - 1.0) * self.aspect * tan_half
        ndc_y = (1.0 - 2.0 * (py + 0.5) / height) * tan_half
        d_cam = np.array([ndc_x, ndc_y, -1.0])
        d_cam /= np.linalg.norm(d_cam)
        return Ray(self.eye, transform_direction(self.transform, d_cam))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
# Columns of the camera-to-world rotation block
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_back = ti.Vector.field(3, dtype=ti.f32, shape=())
_tan_half_fovy = ti.field(dtype=ti.f32, shape=())
_aspect = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Copy a camera into the kernel-visible fields.

    Must be called from Python scope before a render kernel runs.
    """
    m = camera.transform.matrix
    _camera_origin[None] = m[:3, 3].tolist()
    _camera_right[None] = m[:3, 0].tolist()
    _camera_up[None] = m[:3, 1].tolist()
    _camera_back[None] = m[:3, 2].tolist()
    _tan_half_fovy[None] = math.tan(0.5 * camera.fovy)
    _aspect[None] = camera.aspect


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_camera_ray(x: ti.f32, y: ti.f32, width: ti.i32, height: ti.i32):
    """Generate a primary ray through a continuous image position.

    Args:
        x: Horizontal position in pixels (pixel column plus sub-pixel offset).
        y: Vertical position in pixels, growing downward.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A tuple of (origin, direction) with a unit direction for rigid
        camera transforms.
    """
    tan_half = _tan_half_fovy[None]
    ndc_x = (2.0 * x / ti.cast(width, ti.f32) - 1.0) * _aspect[None] * tan_half
    ndc_y = (1.0 - 2.0 * y / ti.cast(height, ti.f32)) * tan_half
    d_cam = tm.normalize(vec3(ndc_x, ndc_y, -1.0))
    direction = d_cam.x * _camera_right[None] + d_cam.y * _camera_up[None] + d_cam.z * _camera_back[None]
    return _camera_origin[None], direction


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera field state for debugging."""
    return {
        "origin": tuple(float(c) for c in _camera_origin[None]),
        "right": tuple(float(c) for c in _camera_right[None]),
        "up": tuple(float(c) for c in _camera_up[None]),
        "back": tuple(float(c) for c in _camera_back[None]),
    }
