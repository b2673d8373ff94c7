"""Renderers: the simple ray tracer and the path tracer.

Both renderers share one preallocated render target and the same
scheduling: the image is split into 16x16 tiles and the outermost kernel
loop runs over (tile, pixel-in-tile) pairs, so Taichi hands whole tiles to
its worker threads. Every kernel iteration writes only its own pixel and
the scene storage is read-only while the kernel runs.

The path tracer seeds one random stream per pixel from (seed, tile,
index in tile) before sampling, so a render is a deterministic function of
the scene, the image size and the render settings.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.core.renderer import PathTracer
    >>> from lumen.io.image import Image
    >>> from lumen.scene.demo import create_demo_scene
    >>>
    >>> scene = create_demo_scene(320, 240)
    >>> image = Image(320, 240)
    >>> PathTracer(samples_per_pixel=16).render(scene, image, 320, 240)
"""

import logging
import time

import numpy as np
import taichi as ti
import taichi.math as tm

from lumen.camera.pinhole import get_camera_ray
from lumen.config import DEFAULT_MAX_DEPTH, DEFAULT_SAMPLES_PER_PIXEL, DEFAULT_SEED, RenderSettings
from lumen.core.direct import shade_direct
from lumen.core.integrator import trace_path
from lumen.core.sampler import random_float, seed_stream
from lumen.io.image import Image
from lumen.scene.scene import Scene
from lumen.scene.storage import upload_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Side of the square tiles handed to worker threads
TILE_SIZE = 16
_TILE_PIXELS = TILE_SIZE * TILE_SIZE

# Indexed [row, column] so the active region copies straight into an Image
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


def _check_image_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


def _tile_grid(width: int, height: int) -> tuple[int, int]:
    """(tiles per row, total tiles) covering a width x height image."""
    tiles_x = (width + TILE_SIZE - 1) // TILE_SIZE
    tiles_y = (height + TILE_SIZE - 1) // TILE_SIZE
    return tiles_x, tiles_x * tiles_y


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Drop non-finite samples and clamp negative values (numerical errors)."""
    result = tm.max(color, vec3(0.0, 0.0, 0.0))
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            result = vec3(0.0, 0.0, 0.0)
    return result


@ti.kernel
def _render_direct_tiles(width: ti.i32, height: ti.i32, tiles_x: ti.i32, num_tiles: ti.i32):
    ti.loop_config(block_dim=_TILE_PIXELS)
    for tile, index in ti.ndrange(num_tiles, _TILE_PIXELS):
        x = (tile % tiles_x) * TILE_SIZE + index % TILE_SIZE
        y = (tile // tiles_x) * TILE_SIZE + index // TILE_SIZE
        if x < width and y < height:
            origin, direction = get_camera_ray(ti.cast(x, ti.f32) + 0.5, ti.cast(y, ti.f32) + 0.5, width, height)
            _color_buffer[y, x] = shade_direct(origin, direction)


@ti.kernel
def _render_path_tiles(
    width: ti.i32,
    height: ti.i32,
    tiles_x: ti.i32,
    num_tiles: ti.i32,
    seed: ti.u32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    ti.loop_config(block_dim=_TILE_PIXELS)
    for tile, index in ti.ndrange(num_tiles, _TILE_PIXELS):
        x = (tile % tiles_x) * TILE_SIZE + index % TILE_SIZE
        y = (tile // tiles_x) * TILE_SIZE + index // TILE_SIZE
        if x < width and y < height:
            slot = y * width + x
            seed_stream(slot, seed, tile, index)

            total = vec3(0.0, 0.0, 0.0)
            for _ in range(samples_per_pixel):
                # Jitter within the pixel for anti-aliasing
                px = ti.cast(x, ti.f32) + random_float(slot)
                py = ti.cast(y, ti.f32) + random_float(slot)
                origin, direction = get_camera_ray(px, py, width, height)
                total += _sanitize(trace_path(origin, direction, max_depth, slot))

            _color_buffer[y, x] = total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Public Rendering API
# =============================================================================


class Renderer:
    """Base class of the renderers.

    Subclasses implement ``_render_kernel``; ``render`` takes care of the
    upload, the image size checks and copying the result out.
    """

    name = "renderer"

    def render(self, scene: Scene, image: Image, width: int, height: int) -> Image:
        """Render ``scene`` into ``image``.

        The image is resized to width x height if needed; every pixel is
        overwritten.

        Args:
            scene: The scene to render. It must not change during the call.
            image: Destination buffer.
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            ``image``, for chaining.

        Raises:
            ValueError: If the dimensions are not positive or exceed the
                render target capacity.
            RuntimeError: If the scene exceeds the storage capacity.
        """
        _check_image_size(width, height)
        if image.size != (width, height):
            image.resize(width, height)

        upload_scene(scene)
        tiles_x, num_tiles = _tile_grid(width, height)

        start = time.perf_counter()
        self._render_kernel(width, height, tiles_x, num_tiles)
        ti.sync()
        elapsed = time.perf_counter() - start

        image.pixels[...] = self._read_buffer(width, height)
        logger.info(
            "Rendered %dx%d (%d objects) with %s in %.3fs",
            width,
            height,
            len(scene),
            self.name,
            elapsed,
        )
        return image

    def _render_kernel(self, width: int, height: int, tiles_x: int, num_tiles: int) -> None:
        raise NotImplementedError

    @staticmethod
    def _read_buffer(width: int, height: int) -> np.ndarray:
        return _color_buffer.to_numpy()[:height, :width].astype(np.float64)


class SimpleRayTracer(Renderer):
    """Direct illumination: one ray through each pixel center, no recursion."""

    name = "simple ray tracer"

    def _render_kernel(self, width: int, height: int, tiles_x: int, num_tiles: int) -> None:
        _render_direct_tiles(width, height, tiles_x, num_tiles)


class PathTracer(Renderer):
    """Monte Carlo path tracer.

    Attributes:
        settings: Samples per pixel, maximum depth and seed.
    """

    name = "path tracer"

    def __init__(
        self,
        samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
        max_depth: int = DEFAULT_MAX_DEPTH,
        seed: int = DEFAULT_SEED,
    ) -> None:
        self.settings = RenderSettings(samples_per_pixel, max_depth, seed)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "PathTracer":
        return cls(settings.samples_per_pixel, settings.max_depth, settings.seed)

    @property
    def samples_per_pixel(self) -> int:
        return self.settings.samples_per_pixel

    @property
    def max_depth(self) -> int:
        return self.settings.max_depth

    @property
    def seed(self) -> int:
        return self.settings.seed

    def __repr__(self) -> str:
        return f"PathTracer(samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth}, seed={self.seed})"

    def _render_kernel(self, width: int, height: int, tiles_x: int, num_tiles: int) -> None:
        logger.debug("Path tracing %d spp, max depth %d, seed %d", self.samples_per_pixel, self.max_depth, self.seed)
        _render_path_tiles(
            width,
            height,
            tiles_x,
            num_tiles,
            self.seed & 0xFFFFFFFF,
            self.samples_per_pixel,
            self.max_depth,
        )
