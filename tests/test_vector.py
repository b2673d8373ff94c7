"""Unit tests for the host vector helpers.

Tests cover:
- Construction and checked access
- Dot, cross, norm and normalization (including the zero vector)
- Interpolation and component-wise min/max
- Dimension changes and homogeneous coordinates
"""

import numpy as np
import pytest

from lumen.linalg import vector as vec


class TestVectorConstruction:
    """Tests for building vectors."""

    def test_vector_from_components(self):
        """Test vector() builds a float64 array."""
        v = vec.vector(1, 2, 3)
        assert v.dtype == np.float64
        assert v.tolist() == [1.0, 2.0, 3.0]

    def test_as_vector_checks_size(self):
        """Test as_vector rejects the wrong number of components."""
        assert vec.as_vector((1.0, 2.0), 2).tolist() == [1.0, 2.0]
        with pytest.raises(ValueError):
            vec.as_vector((1.0, 2.0), 3)

    def test_zeros_and_ones(self):
        assert vec.zeros(4).tolist() == [0.0, 0.0, 0.0, 0.0]
        assert vec.ones(2).tolist() == [1.0, 1.0]

    def test_unit(self):
        """Test unit() returns the basis vector and rejects bad axes."""
        assert vec.unit(3, 1).tolist() == [0.0, 1.0, 0.0]
        with pytest.raises(IndexError):
            vec.unit(3, 3)


class TestVectorAccess:
    """Tests for checked element access."""

    def test_at_in_range(self):
        v = vec.vector(4.0, 5.0, 6.0)
        assert vec.at(v, 2) == 6.0

    def test_at_out_of_range(self):
        """Test at() raises past the end and for negative indices."""
        v = vec.vector(4.0, 5.0, 6.0)
        with pytest.raises(IndexError):
            vec.at(v, 3)
        with pytest.raises(IndexError):
            vec.at(v, -1)


class TestVectorOperations:
    """Tests for vector arithmetic."""

    def test_dot(self):
        assert vec.dot(vec.vector(1, 2, 3), vec.vector(4, 5, 6)) == 32.0

    def test_cross_right_handed(self):
        """Test x cross y = z."""
        result = vec.cross(vec.unit(3, 0), vec.unit(3, 1))
        assert np.allclose(result, [0.0, 0.0, 1.0])

    def test_norm(self):
        assert vec.norm(vec.vector(3.0, 4.0)) == pytest.approx(5.0)

    def test_normalize(self):
        result = vec.normalize(vec.vector(0.0, 3.0, 4.0))
        assert np.allclose(result, [0.0, 0.6, 0.8])
        assert vec.norm(result) == pytest.approx(1.0)

    def test_normalize_zero_vector(self):
        """Test the zero vector normalizes to zero without NaNs."""
        result = vec.normalize(vec.zeros(3))
        assert result.tolist() == [0.0, 0.0, 0.0]
        assert not np.any(np.isnan(result))

    def test_lerp(self):
        """Test interpolation at the endpoints, midpoint and beyond."""
        a = vec.vector(0.0, 0.0)
        b = vec.vector(2.0, 4.0)
        assert vec.lerp(a, b, 0.0).tolist() == [0.0, 0.0]
        assert vec.lerp(a, b, 0.5).tolist() == [1.0, 2.0]
        assert vec.lerp(a, b, 1.0).tolist() == [2.0, 4.0]
        assert vec.lerp(a, b, 2.0).tolist() == [4.0, 8.0]

    def test_component_min_max(self):
        a = vec.vector(1.0, 5.0, -2.0)
        b = vec.vector(3.0, 0.0, -1.0)
        assert vec.component_min(a, b).tolist() == [1.0, 0.0, -2.0]
        assert vec.component_max(a, b).tolist() == [3.0, 5.0, -1.0]


class TestVectorDimensions:
    """Tests for resizing and homogeneous coordinates."""

    def test_resize_truncates(self):
        assert vec.resize_dim(vec.vector(1, 2, 3), 2).tolist() == [1.0, 2.0]

    def test_resize_pads(self):
        assert vec.resize_dim(vec.vector(1, 2), 4, fill=9.0).tolist() == [1.0, 2.0, 9.0, 9.0]

    def test_homogeneous_point_and_direction(self):
        """Test points get w = 1 and directions w = 0."""
        v = vec.vector(1.0, 2.0, 3.0)
        assert vec.to_homogeneous_point(v).tolist() == [1.0, 2.0, 3.0, 1.0]
        assert vec.to_homogeneous_dir(v).tolist() == [1.0, 2.0, 3.0, 0.0]
