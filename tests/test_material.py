"""Unit tests for material records and albedo properties.

Tests cover:
- Named constructors and parameter clamping
- Emitted radiance and albedo evaluation on the host
- Solid and checkerboard albedo properties
"""

import numpy as np
import pytest

from lumen.materials import Checkerboard, Material, MaterialKind, SolidColor


class TestMaterialConstructors:
    """Tests for building materials."""

    def test_default_material(self):
        """Test the default is a black, rough, opaque generic material."""
        mat = Material()
        assert mat.kind == MaterialKind.GENERIC
        assert mat.albedo == (0.0, 0.0, 0.0)
        assert mat.roughness == 1.0
        assert mat.transparency == 0.0

    def test_lambertian(self):
        mat = Material.lambertian((0.9, 0.1, 0.1))
        assert mat.kind == MaterialKind.LAMBERTIAN
        assert mat.albedo == pytest.approx((0.9, 0.1, 0.1))

    def test_metal_clamps_roughness(self):
        assert Material.metal((0.8, 0.8, 0.8), roughness=1.7).roughness == 1.0
        assert Material.metal((0.8, 0.8, 0.8), roughness=-0.2).roughness == 0.0

    def test_glass(self):
        mat = Material.glass((0.9, 1.0, 0.9), roughness=0.1, transparency=0.3)
        assert mat.kind == MaterialKind.GLASS
        assert mat.transparency == pytest.approx(0.3)
        assert mat.roughness == pytest.approx(0.1)

    def test_emissive(self):
        mat = Material.emissive((1.0, 0.5, 0.25), power=4.0)
        assert mat.kind == MaterialKind.EMISSIVE
        assert mat.emission_power == 4.0

    def test_from_params(self):
        mat = Material.from_params((0.5, 0.5, 0.5), 0.3, 0.2, (0.0, 0.0, 0.0))
        assert mat.kind == MaterialKind.GENERIC
        assert mat.roughness == pytest.approx(0.3)
        assert mat.transparency == pytest.approx(0.2)

    def test_kind_from_int(self):
        assert Material(kind=1).kind is MaterialKind.METAL

    def test_materials_are_frozen(self):
        mat = Material.lambertian((0.5, 0.5, 0.5))
        with pytest.raises(AttributeError):
            mat.roughness = 0.5

    def test_equality_ignores_albedo_property(self):
        a = Material.lambertian((0.5, 0.5, 0.5))
        b = Material.lambertian((0.5, 0.5, 0.5), albedo_property=SolidColor((1.0, 0.0, 0.0)))
        assert a == b


class TestMaterialQueries:
    """Tests for the host material queries."""

    def test_emitted_radiance(self):
        mat = Material.emissive((1.0, 0.5, 0.0), power=2.0)
        assert mat.emitted_radiance().tolist() == [2.0, 1.0, 0.0]

    def test_non_emissive_emits_nothing(self):
        """Test radiance is ignored unless the kind is EMISSIVE."""
        mat = Material.from_params((0.5, 0.5, 0.5), 1.0, 0.0, (1.0, 1.0, 1.0), 3.0)
        assert mat.emitted_radiance().tolist() == [0.0, 0.0, 0.0]

    def test_evaluate_albedo_constant(self):
        mat = Material.lambertian((0.2, 0.4, 0.6))
        assert np.allclose(mat.evaluate_albedo(0.7, 0.1), [0.2, 0.4, 0.6])

    def test_evaluate_albedo_solid_property(self):
        mat = Material.lambertian((0.2, 0.4, 0.6), albedo_property=SolidColor((1.0, 1.0, 0.0)))
        assert mat.evaluate_albedo().tolist() == [1.0, 1.0, 0.0]


class TestCheckerboard:
    """Tests for the checkerboard albedo property."""

    def test_cells_alternate(self):
        checker = Checkerboard((1.0, 1.0, 1.0), (0.0, 0.0, 0.0), tiles_u=2, tiles_v=2)
        assert checker.evaluate(0.25, 0.25, (0.0, 0.0, 0.0)).tolist() == [1.0, 1.0, 1.0]
        assert checker.evaluate(0.75, 0.25, (0.0, 0.0, 0.0)).tolist() == [0.0, 0.0, 0.0]
        assert checker.evaluate(0.25, 0.75, (0.0, 0.0, 0.0)).tolist() == [0.0, 0.0, 0.0]
        assert checker.evaluate(0.75, 0.75, (0.0, 0.0, 0.0)).tolist() == [1.0, 1.0, 1.0]

    def test_default_tiling(self):
        checker = Checkerboard((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert checker.tiles_u == 8
        assert checker.evaluate(1.5 / 8, 0.5 / 8, (0.0, 0.0, 0.0)).tolist() == [0.0, 0.0, 1.0]

    def test_material_uses_checker(self):
        checker = Checkerboard((1.0, 1.0, 1.0), (0.0, 0.0, 0.0), tiles_u=1, tiles_v=1)
        mat = Material.lambertian((0.5, 0.5, 0.5), albedo_property=checker)
        assert mat.evaluate_albedo(0.5, 0.5).tolist() == [1.0, 1.0, 1.0]
