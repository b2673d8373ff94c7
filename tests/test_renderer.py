"""Tests for the simple ray tracer and the path tracer.

Tests cover:
- Emissive and diffuse spheres under direct illumination
- Background fill and image orientation
- Image resizing and size validation
- Path tracer determinism, seeding and convergence
"""

import math

import numpy as np
import pytest


def _scene(material, background=(0.0, 0.0, 0.0), transform=None):
    """A unit sphere at the origin seen from (0, 0, 5)."""
    from lumen.camera.pinhole import Camera
    from lumen.geometry.sphere import Sphere
    from lumen.linalg import Transform
    from lumen.scene import Scene, SceneObject

    camera = Camera.from_look_at((0.0, 0.0, 5.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), math.pi / 3, 1.0)
    scene = Scene(camera, background=background)
    if material is not None:
        scene.add_object(SceneObject(Sphere(), material, transform or Transform()))
    return scene


class TestSimpleRayTracer:
    """Tests for direct-illumination rendering."""

    def test_emissive_sphere(self):
        """Test an emitter shows its radiance at the center and nothing at the corner."""
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.emissive((1.0, 0.0, 0.0), power=2.0))
        image = SimpleRayTracer().render(scene, Image(9, 9), 9, 9)

        center = image.at(4, 4)
        assert center[0] > 0.9
        assert center[1] < 1e-6
        assert center[2] < 1e-6
        assert image.at(0, 0).tolist() == [0.0, 0.0, 0.0]

    def test_gray_lambertian_sphere(self):
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.lambertian((0.5, 0.5, 0.5)))
        image = SimpleRayTracer().render(scene, Image(9, 9), 9, 9)

        center = image.at(4, 4)
        assert np.all(center > 0.0)
        # Normal roughly +z, light along (1, 1, 1) / sqrt(3)
        assert center[0] == pytest.approx(0.5 / math.pi / math.sqrt(3.0), rel=0.05)

    def test_empty_scene_is_background(self):
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image

        scene = _scene(None, background=(0.1, 0.2, 0.4))
        image = SimpleRayTracer().render(scene, Image(5, 3), 5, 3)
        assert np.allclose(image.pixels, [0.1, 0.2, 0.4], atol=1e-6)

    def test_row_zero_is_top(self):
        """Test an emitter above the axis lights the upper rows only."""
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image
        from lumen.linalg import Transform
        from lumen.materials import Material

        scene = _scene(Material.emissive((1.0, 1.0, 1.0)), transform=Transform.translation((0.0, 1.5, 0.0)))
        image = SimpleRayTracer().render(scene, Image(9, 9), 9, 9)
        assert image.at(4, 2)[0] > 0.5
        assert image.at(4, 6)[0] == 0.0

    def test_glass_has_no_direct_term(self):
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.glass((1.0, 1.0, 1.0)), background=(0.3, 0.3, 0.3))
        image = SimpleRayTracer().render(scene, Image(9, 9), 9, 9)
        assert image.at(4, 4).tolist() == [0.0, 0.0, 0.0]
        assert np.allclose(image.at(0, 0), 0.3, atol=1e-6)


class TestRenderTarget:
    """Tests for image handling shared by both renderers."""

    def test_image_is_resized(self):
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image

        image = Image(1, 1)
        result = SimpleRayTracer().render(_scene(None), image, 7, 5)
        assert result is image
        assert image.size == (7, 5)

    def test_oversized_image_rejected(self):
        from lumen.core.renderer import MAX_IMAGE_WIDTH, SimpleRayTracer
        from lumen.io.image import Image

        with pytest.raises(ValueError):
            SimpleRayTracer().render(_scene(None), Image(1, 1), MAX_IMAGE_WIDTH + 1, 4)

    def test_empty_image_rejected(self):
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image

        with pytest.raises(ValueError):
            SimpleRayTracer().render(_scene(None), Image(1, 1), 0, 4)

    def test_non_tile_multiple_size(self):
        """Test sizes that do not fill the last tile are rendered completely."""
        from lumen.core.renderer import SimpleRayTracer
        from lumen.io.image import Image

        scene = _scene(None, background=(1.0, 0.5, 0.25))
        image = SimpleRayTracer().render(scene, Image(1, 1), 17, 33)
        assert np.allclose(image.pixels, [1.0, 0.5, 0.25])


class TestPathTracer:
    """Tests for Monte Carlo rendering."""

    def test_settings_validation(self):
        from lumen.core.renderer import PathTracer

        with pytest.raises(ValueError):
            PathTracer(samples_per_pixel=0)
        with pytest.raises(ValueError):
            PathTracer(max_depth=0)

    def test_from_settings(self):
        from lumen.config import RenderSettings
        from lumen.core.renderer import PathTracer

        tracer = PathTracer.from_settings(RenderSettings(samples_per_pixel=4, max_depth=3, seed=9))
        assert tracer.samples_per_pixel == 4
        assert tracer.max_depth == 3
        assert tracer.seed == 9
        assert repr(tracer) == "PathTracer(samples_per_pixel=4, max_depth=3, seed=9)"

    def test_deterministic(self):
        """Test identical settings render identical images."""
        from lumen.core.renderer import PathTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.lambertian((0.7, 0.7, 0.7)), background=(0.5, 0.6, 0.9))
        a = PathTracer(samples_per_pixel=4, max_depth=4, seed=3).render(scene, Image(16, 16), 16, 16)
        b = PathTracer(samples_per_pixel=4, max_depth=4, seed=3).render(scene, Image(16, 16), 16, 16)
        assert np.array_equal(a.pixels, b.pixels)

    def test_seed_changes_noise(self):
        from lumen.core.renderer import PathTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.lambertian((0.7, 0.7, 0.7)), background=(0.5, 0.6, 0.9))
        a = PathTracer(samples_per_pixel=2, max_depth=4, seed=1).render(scene, Image(16, 16), 16, 16)
        b = PathTracer(samples_per_pixel=2, max_depth=4, seed=2).render(scene, Image(16, 16), 16, 16)
        assert not np.array_equal(a.pixels, b.pixels)

    def test_emitter_converges_to_radiance(self):
        """Test a pixel fully covered by an emitter equals radiance * power."""
        from lumen.core.renderer import PathTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.emissive((1.0, 0.5, 0.25), power=2.0))
        image = PathTracer(samples_per_pixel=8, max_depth=4).render(scene, Image(9, 9), 9, 9)
        assert np.allclose(image.at(4, 4), [2.0, 1.0, 0.5], atol=1e-5)
        assert image.at(0, 0).tolist() == [0.0, 0.0, 0.0]

    def test_diffuse_sphere_under_uniform_sky(self):
        """Test a convex diffuse surface under a white sky reflects exactly its albedo.

        Every bounce off a convex object escapes, so each sample is albedo * sky.
        """
        from lumen.core.renderer import PathTracer
        from lumen.io.image import Image
        from lumen.materials import Material

        scene = _scene(Material.lambertian((0.5, 0.25, 0.75)), background=(1.0, 1.0, 1.0))
        image = PathTracer(samples_per_pixel=16, max_depth=8).render(scene, Image(9, 9), 9, 9)
        assert np.allclose(image.at(4, 4), [0.5, 0.25, 0.75], atol=1e-4)
        assert np.allclose(image.at(0, 0), 1.0, atol=1e-6)

    def test_values_are_finite_and_non_negative(self):
        from lumen.core.renderer import PathTracer
        from lumen.io.image import Image
        from lumen.scene.demo import create_demo_scene

        scene = create_demo_scene(24, 16)
        image = PathTracer(samples_per_pixel=4, max_depth=6, seed=5).render(scene, Image(24, 16), 24, 16)
        assert np.all(np.isfinite(image.pixels))
        assert image.pixels.min() >= 0.0
