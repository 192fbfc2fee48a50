"""Tests for geometry_primitives module."""
import numpy as np
import pytest

from geometry_primitives import (
    Plane,
    barycentric,
    intersect_coplanar_lines,
    intersect_line_plane,
    intersect_segment_plane,
    normalize,
    point_on_segment,
    rotate_about_axis,
    triangle_normal,
)


def v(*xyz):
    return np.array(xyz, dtype=float)


class TestVectors:
    """Normalization, normals, rotation."""

    def test_normalize_zero_stays_zero(self):
        assert np.allclose(normalize(v(0, 0, 0)), 0.0)

    def test_normalize_unit_length(self):
        assert np.linalg.norm(normalize(v(3, 4, 12))) == pytest.approx(1.0)

    def test_triangle_normal_ccw_points_up(self):
        tri = np.array([v(-1, -1, 0), v(1, -1, 0), v(1, 1, 0)])
        assert np.allclose(triangle_normal(tri), [0, 0, 1])

    def test_collinear_triangle_is_degenerate(self):
        tri = np.array([v(0, 0, 0), v(1, 0, 0), v(2, 0, 0)])
        assert triangle_normal(tri) is None

    def test_tiny_triangle_is_degenerate(self):
        tri = np.array([v(0, 0, 0), v(0.005, 0, 0), v(0, 0.005, 0)])
        assert triangle_normal(tri) is None

    def test_rotate_about_z(self):
        r = rotate_about_axis(v(1, 0, 0), v(0, 0, 1), 90.0)
        assert np.allclose(r, [0, 1, 0], atol=1e-12)

    def test_barycentric_of_centroid(self):
        tri = np.array([v(0, 0, 0), v(3, 0, 0), v(0, 3, 0)])
        bc = barycentric(tri.mean(axis=0), tri)
        assert np.allclose(bc, [1 / 3, 1 / 3, 1 / 3])


class TestPlanes:
    """Plane construction and line/segment intersection."""

    def test_from_points_collinear_is_none(self):
        assert Plane.from_points(v(0, 0, 0), v(1, 1, 1), v(2, 2, 2)) is None

    def test_signed_distance(self):
        plane = Plane.from_normal_and_point(v(0, 0, 2), v(0, 0, 1))
        assert plane.signed_distance(v(5, 5, 3)) == pytest.approx(2.0)
        assert plane.offset == pytest.approx(1.0)

    def test_line_parallel_to_plane(self):
        plane = Plane.from_normal_and_point(v(0, 0, 1), v(0, 0, 0))
        assert intersect_line_plane(v(0, 0, 1), v(1, 0, 0), plane) is None

    def test_segment_crossing(self):
        plane = Plane.from_normal_and_point(v(0, 0, 1), v(0, 0, 0))
        pts = intersect_segment_plane(v(1, 2, -1), v(1, 2, 3), plane)
        assert len(pts) == 1
        assert np.allclose(pts[0], [1, 2, 0])

    def test_segment_not_reaching_plane(self):
        """Edges are bounded: the infinite line would hit, the segment does not."""
        plane = Plane.from_normal_and_point(v(0, 0, 1), v(0, 0, 0))
        assert intersect_segment_plane(v(0, 0, 1), v(0, 0, 2), plane) == []

    def test_segment_in_plane_returns_both_endpoints(self):
        plane = Plane.from_normal_and_point(v(0, 0, 1), v(0, 0, 0))
        pts = intersect_segment_plane(v(0, 0, 0), v(1, 0, 0), plane)
        assert len(pts) == 2

    def test_segment_touching_at_endpoint(self):
        plane = Plane.from_normal_and_point(v(0, 0, 1), v(0, 0, 0))
        pts = intersect_segment_plane(v(0, 0, 0), v(0, 0, 1), plane)
        assert len(pts) == 1
        assert np.allclose(pts[0], [0, 0, 0])


class TestCoplanarLines:
    """intersect_coplanar_lines and point_on_segment."""

    def test_perpendicular_lines(self):
        p = intersect_coplanar_lines(v(0, 0, 0), v(1, 0, 0), v(1, -1, 0), v(0, 1, 0))
        assert np.allclose(p, [1, 0, 0])

    def test_unnormalized_directions(self):
        p = intersect_coplanar_lines(v(0, 0, 0), v(5, 5, 0), v(2, 0, 0), v(0, 3, 0))
        assert np.allclose(p, [2, 2, 0])

    def test_parallel_lines(self):
        assert intersect_coplanar_lines(v(0, 0, 0), v(1, 0, 0), v(0, 1, 0), v(2, 0, 0)) is None

    def test_zero_direction(self):
        assert intersect_coplanar_lines(v(0, 0, 0), v(0, 0, 0), v(0, 1, 0), v(1, 0, 0)) is None

    def test_point_on_segment_midpoint(self):
        assert point_on_segment(v(0.5, 0.5, 0), v(0, 0, 0), v(1, 1, 0))

    def test_point_on_segment_endpoints(self):
        assert point_on_segment(v(0, 0, 0), v(0, 0, 0), v(1, 1, 0))
        assert point_on_segment(v(1, 1, 0), v(0, 0, 0), v(1, 1, 0))

    def test_point_beyond_end(self):
        assert not point_on_segment(v(1.5, 1.5, 0), v(0, 0, 0), v(1, 1, 0))

    def test_point_off_line(self):
        assert not point_on_segment(v(0.5, 0.6, 0), v(0, 0, 0), v(1, 1, 0))

    def test_degenerate_segment(self):
        assert point_on_segment(v(1, 1, 1), v(1, 1, 1), v(1, 1, 1))
        assert not point_on_segment(v(0, 1, 1), v(1, 1, 1), v(1, 1, 1))
