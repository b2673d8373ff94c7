"""Unit tests for scene storage and kernel-side scene traversal.

Tests cover:
- Uploading objects, materials and the background
- Capacity and unsupported-property errors
- intersect_scene: closest hit, object ids, facing normals and misses
"""

import numpy as np
import pytest
import taichi as ti


class TestSceneStorage:
    """Tests for upload_objects and clear_storage."""

    def test_upload_and_clear(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject
        from lumen.scene.storage import background_color, clear_storage, get_object_count, upload_objects

        upload_objects([SceneObject(Sphere()), SceneObject(Sphere())], background=(0.1, 0.2, 0.3))
        assert get_object_count() == 2
        assert np.allclose(background_color[None].to_numpy(), [0.1, 0.2, 0.3])

        clear_storage()
        assert get_object_count() == 0
        assert np.allclose(background_color[None].to_numpy(), 0.0)

    def test_shared_geometry_uploaded_once(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject
        from lumen.scene.storage import obj_shape, upload_objects

        shared = Sphere()
        upload_objects([SceneObject(shared), SceneObject(Sphere()), SceneObject(shared)])
        assert obj_shape[0] == 0
        assert obj_shape[1] == 1
        assert obj_shape[2] == 0

    def test_material_slots(self):
        from lumen.geometry.sphere import Sphere
        from lumen.materials import Material, MaterialKind
        from lumen.scene import SceneObject
        from lumen.scene.storage import material_albedo, material_kind, material_roughness, upload_objects

        upload_objects(
            [
                SceneObject(Sphere(), Material.lambertian((0.9, 0.1, 0.1))),
                SceneObject(Sphere(), Material.metal((0.1, 0.9, 0.1), roughness=0.1)),
            ]
        )
        assert material_kind[0] == int(MaterialKind.LAMBERTIAN)
        assert material_kind[1] == int(MaterialKind.METAL)
        assert np.allclose(material_albedo[0].to_numpy(), [0.9, 0.1, 0.1])
        assert material_roughness[1] == pytest.approx(0.1)

    def test_too_many_objects(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject
        from lumen.scene.storage import MAX_OBJECTS, upload_objects

        sphere = Sphere()
        with pytest.raises(RuntimeError, match="Maximum number of objects"):
            upload_objects([SceneObject(sphere) for _ in range(MAX_OBJECTS + 1)])

    def test_unsupported_albedo_property(self):
        from lumen.geometry.sphere import Sphere
        from lumen.materials import Material, MaterialProperty
        from lumen.scene import SceneObject
        from lumen.scene.storage import upload_objects

        class Gradient(MaterialProperty):
            def evaluate(self, u, v, point):
                return np.array([u, v, 0.0])

        material = Material.lambertian((0.5, 0.5, 0.5), albedo_property=Gradient())
        with pytest.raises(TypeError):
            upload_objects([SceneObject(Sphere(), material)])

    def test_bounded_flags(self):
        """Test infinite planes skip the box test while spheres keep it."""
        from lumen.geometry.plane import Plane
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject
        from lumen.scene.storage import obj_bounded, upload_objects

        upload_objects([SceneObject(Sphere()), SceneObject(Plane())])
        assert obj_bounded[0] == 1
        assert obj_bounded[1] == 0


class TestIntersectScene:
    """Tests for the kernel traversal."""

    def _trace(self, origin, direction, t_min=0.0, t_max=1e10):
        from lumen.scene.intersection import intersect_scene

        ray = ti.Vector.field(3, dtype=ti.f32, shape=2)
        ray[0] = list(origin)
        ray[1] = list(direction)
        hit = ti.Vector.field(3, dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        normal = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(t_min: ti.f32, t_max: ti.f32):
            for _ in range(1):
                rec = intersect_scene(ray[0], ray[1], t_min, t_max)
                hit[None] = ti.Vector([rec.hit, rec.object_id, rec.front_face])
                t_val[None] = rec.t
                normal[None] = rec.normal

        test_kernel(t_min, t_max)
        flags = hit[None]
        return int(flags[0]), int(flags[1]), int(flags[2]), float(t_val[None]), normal[None].to_numpy()

    def test_empty_scene(self):
        hit, object_id, _, _, _ = self._trace((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert object_id == -1

    def test_closest_hit_and_id(self):
        from lumen.geometry.sphere import Sphere
        from lumen.linalg import Transform
        from lumen.scene import SceneObject
        from lumen.scene.storage import upload_objects

        upload_objects(
            [
                SceneObject(Sphere(), transform=Transform.translation((0.0, 0.0, -4.0))),
                SceneObject(Sphere()),
            ]
        )
        hit, object_id, front_face, t, normal = self._trace((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert object_id == 1
        assert front_face == 1
        assert abs(t - 4.0) < 1e-5
        assert np.allclose(normal, [0.0, 0.0, 1.0], atol=1e-5)

    def test_normal_faces_ray_from_inside(self):
        """Test the kernel record flips the normal toward the ray on back faces."""
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject
        from lumen.scene.storage import upload_objects

        upload_objects([SceneObject(Sphere())])
        hit, _, front_face, t, normal = self._trace((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 1
        assert front_face == 0
        assert abs(t - 1.0) < 1e-5
        assert np.allclose(normal, [0.0, -1.0, 0.0], atol=1e-5)

    def test_respects_interval(self):
        from lumen.geometry.sphere import Sphere
        from lumen.scene import SceneObject
        from lumen.scene.storage import upload_objects

        upload_objects([SceneObject(Sphere())])
        hit, _, _, _, _ = self._trace((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_max=3.0)
        assert hit == 0

    def test_mesh_object(self):
        from lumen.geometry.mesh import Mesh
        from lumen.linalg import Transform
        from lumen.scene import SceneObject
        from lumen.scene.storage import upload_objects

        mesh = Mesh()
        mesh.add_vertex((-1.0, -1.0, 0.0))
        mesh.add_vertex((1.0, -1.0, 0.0))
        mesh.add_vertex((0.0, 1.0, 0.0))
        mesh.add_triangle(0, 1, 2)
        upload_objects([SceneObject(mesh, transform=Transform.translation((0.0, 0.0, -2.0)))])

        hit, object_id, _, t, normal = self._trace((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert object_id == 0
        assert abs(t - 7.0) < 1e-5
        assert np.allclose(normal, [0.0, 0.0, 1.0], atol=1e-5)
