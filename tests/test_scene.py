"""Unit tests for the scene container and scene-level tracing.

Tests cover:
- Object bookkeeping (indices, size, iteration)
- Scene bounding boxes
- Closest-hit traversal, insertion-order tie breaking and interval limits
- Shared geometry under several transforms
"""

import math

import numpy as np
import pytest

from lumen.linalg import Transform


def _camera():
    from lumen.camera.pinhole import Camera

    return Camera.from_look_at((0.0, 0.0, 5.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), math.pi / 3, 1.0)


class TestSceneContainer:
    """Tests for adding and iterating objects."""

    def test_empty_scene(self):
        from lumen.scene import Scene

        scene = Scene(_camera())
        assert scene.empty()
        assert scene.size() == 0
        assert len(scene) == 0
        assert scene.background.tolist() == [0.0, 0.0, 0.0]
        assert scene.aabb().is_empty()

    def test_add_object_returns_index(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera(), background=(0.1, 0.2, 0.4))
        first = SceneObject(Sphere())
        second = SceneObject(Sphere())
        assert scene.add_object(first) == 0
        assert scene.add_object(second) == 1
        assert list(scene) == [first, second]
        assert not scene.empty()
        assert "objects=2" in repr(scene)

    def test_aabb_union(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        scene.add_object(SceneObject(Sphere(), transform=Transform.translation((-2.0, 0.0, 0.0))))
        scene.add_object(SceneObject(Sphere(), transform=Transform.translation((3.0, 1.0, 0.0))))
        box = scene.aabb()
        assert np.allclose(box.min, [-3.0, -1.0, -1.0])
        assert np.allclose(box.max, [4.0, 2.0, 1.0])


class TestSceneTrace:
    """Tests for Scene.trace."""

    def test_nearest_object_wins(self):
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        far = SceneObject(Sphere(), transform=Transform.translation((0.0, 0.0, -5.0)))
        near = SceneObject(Sphere())
        scene.add_object(far)
        scene.add_object(near)

        result = scene.trace(Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert result is not None
        obj, hit = result
        assert obj is near
        assert hit.t == pytest.approx(4.0, abs=1e-5)

    def test_tie_resolves_to_first_object(self):
        """Test coincident surfaces report the object added first."""
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        sphere = Sphere()
        first = SceneObject(sphere)
        second = SceneObject(sphere)
        scene.add_object(first)
        scene.add_object(second)

        obj, _ = scene.trace(Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert obj is first

    def test_miss(self):
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        scene.add_object(SceneObject(Sphere()))
        assert scene.trace(Ray((0.0, 5.0, 5.0), (0.0, 0.0, -1.0))) is None

    def test_empty_scene_misses(self):
        from lumen.core.ray import Ray
        from lumen.scene import Scene

        assert Scene(_camera()).trace(Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))) is None

    def test_hit_at_tmax_is_included(self):
        """Test the ray interval is inclusive at its far end."""
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        scene.add_object(SceneObject(Sphere()))
        result = scene.trace(Ray((0.0, 0.0, 3.0), (0.0, 0.0, -1.0), tmin=0.0, tmax=2.0))
        assert result is not None
        assert result[1].t == pytest.approx(2.0)

    def test_tmin_skips_near_hits(self):
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        scene.add_object(SceneObject(Sphere()))
        result = scene.trace(Ray((0.0, 0.0, 3.0), (0.0, 0.0, -1.0), tmin=2.5))
        assert result is not None
        assert result[1].t == pytest.approx(4.0, abs=1e-5)
        assert not result[1].front_face

    def test_shared_geometry(self):
        """Test one sphere placed twice is hit at both placements."""
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        sphere = Sphere()
        left = SceneObject(sphere, transform=Transform.translation((-2.0, 0.0, 0.0)))
        right = SceneObject(sphere, transform=Transform.translation((2.0, 0.0, 0.0)))
        scene.add_object(left)
        scene.add_object(right)

        obj, _ = scene.trace(Ray((-2.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert obj is left
        obj, _ = scene.trace(Ray((2.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert obj is right

    def test_unbounded_plane_with_sphere(self):
        """Test an infinite plane behind a sphere is only hit where the sphere is absent."""
        from lumen.core.ray import Ray
        from lumen.geometry.plane import Plane
        from lumen.geometry.sphere import Sphere
        from lumen.scene import Scene, SceneObject

        scene = Scene(_camera())
        floor = SceneObject(Plane((0.0, 0.0, -3.0), (0.0, 0.0, 1.0)))
        ball = SceneObject(Sphere())
        scene.add_object(floor)
        scene.add_object(ball)

        obj, hit = scene.trace(Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert obj is ball
        obj, hit = scene.trace(Ray((10.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert obj is floor
        assert hit.t == pytest.approx(8.0, abs=1e-5)
