"""Unit tests for scene objects.

Tests cover:
- Defaults (identity transform, generic material)
- World-space bounding boxes under transforms
- Intersection through object-space transforms: translation, uniform and
  non-uniform scale, rotation
"""

import math

import numpy as np
import pytest

from lumen.linalg import Quaternion, Transform


class TestSceneObjectBasics:
    """Tests for construction and bounding boxes."""

    def test_defaults(self):
        from lumen.geometry.sphere import Sphere
        from lumen.materials import Material
        from lumen.scene import SceneObject

        obj = SceneObject(Sphere())
        assert obj.transform == Transform()
        assert obj.material == Material()

    def test_compare_by_identity(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        sphere = Sphere()
        assert SceneObject(sphere) != SceneObject(sphere)

    def test_aabb_identity(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        box = SceneObject(Sphere()).aabb()
        assert box.min.tolist() == [-1.0, -1.0, -1.0]
        assert box.max.tolist() == [1.0, 1.0, 1.0]

    def test_aabb_scaled_and_translated(self):
        """Test the world box of a sphere scaled by (2, 1, 1) and moved along y."""
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        t = Transform.from_trs((0.0, 3.0, 0.0), Quaternion(), (2.0, 1.0, 1.0))
        box = SceneObject(Sphere(), transform=t).aabb()
        assert np.allclose(box.min, [-2.0, 2.0, -1.0])
        assert np.allclose(box.max, [2.0, 4.0, 1.0])

    def test_aabb_of_plane_is_infinite(self):
        from lumen.geometry.plane import Plane
        from lumen.scene import SceneObject

        obj = SceneObject(Plane(), transform=Transform.translation((0.0, -1.0, 0.0)))
        assert not obj.aabb().is_finite()


class TestSceneObjectIntersect:
    """Tests for SceneObject.intersect."""

    def test_identity(self):
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        hit = SceneObject(Sphere()).intersect(Ray((0.0, 0.0, 3.0), (0.0, 0.0, -1.0)))
        assert hit is not None
        assert hit.t == pytest.approx(2.0, abs=1e-5)

    def test_translated(self):
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        obj = SceneObject(Sphere(), transform=Transform.translation((2.0, 0.0, 0.0)))
        hit = obj.intersect(Ray((2.0, 0.0, 5.0), (0.0, 0.0, -1.0)))
        assert hit is not None
        assert hit.t == pytest.approx(4.0, abs=1e-5)
        assert np.allclose(hit.point, [2.0, 0.0, 1.0], atol=1e-5)
        assert np.allclose(hit.normal, [0.0, 0.0, 1.0], atol=1e-5)

        assert obj.intersect(Ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))) is None

    def test_uniform_scale_reports_world_t(self):
        """Test t is measured along the world ray under scale 0.5."""
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        obj = SceneObject(Sphere(), transform=Transform.scaling((0.5, 0.5, 0.5)))
        hit = obj.intersect(Ray((0.0, 0.0, 2.0), (0.0, 0.0, -1.0)))
        assert hit is not None
        assert hit.t == pytest.approx(1.5, abs=1e-5)
        assert np.allclose(hit.point, [0.0, 0.0, 0.5], atol=1e-5)
        assert np.allclose(hit.normal, [0.0, 0.0, 1.0], atol=1e-5)

    def test_nonuniform_scale_normal(self):
        """Test normals are lifted with the inverse transpose."""
        from lumen.core.ray import Ray
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject

        obj = SceneObject(Sphere(), transform=Transform.scaling((2.0, 1.0, 1.0)))
        hit = obj.intersect(Ray((5.0, 0.0, 0.0), (-1.0, 0.0, 0.0)))
        assert hit is not None
        assert hit.t == pytest.approx(3.0, abs=1e-5)
        assert np.allclose(hit.normal, [1.0, 0.0, 0.0], atol=1e-5)

        # Off-axis point on the ellipsoid x^2/4 + y^2 + z^2 = 1
        z = math.sqrt(0.5)
        hit = obj.intersect(Ray((1.0, 0.5, 5.0), (0.0, 0.0, -1.0)))
        assert hit is not None
        assert hit.t == pytest.approx(5.0 - z, abs=1e-4)
        expected = np.array([0.25, 0.5, z])
        expected /= np.linalg.norm(expected)
        assert np.allclose(hit.normal, expected, atol=1e-3)

    def test_rotated_plane(self):
        """Test a y-up plane turned 90 degrees about x faces +z."""
        from lumen.core.ray import Ray
        from lumen.geometry.plane import Plane
        from lumen.scene import SceneObject

        q = Quaternion.from_axis_angle((1.0, 0.0, 0.0), math.pi / 2)
        obj = SceneObject(Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)), transform=Transform.rotation(q))
        hit = obj.intersect(Ray((0.3, 0.2, 4.0), (0.0, 0.0, -1.0)))
        assert hit is not None
        assert hit.t == pytest.approx(4.0, abs=1e-5)
        assert np.allclose(hit.normal, [0.0, 0.0, 1.0], atol=1e-5)
        assert hit.front_face
