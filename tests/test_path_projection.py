"""Tests for path_projection module."""
import numpy as np
import pytest

from path_projection import project_paths, project_point, summarize_projection
from scene_types import Camera, HatchLineSegment, HatchPath


def seg(a, b):
    return HatchLineSegment(start=np.array(a, dtype=float), end=np.array(b, dtype=float))


class TestProjectPoint:
    """World -> centred viewport coordinates."""

    def test_identity_origin_is_centre(self):
        assert project_point((0.0, 0.0, 0.0), np.eye(4), 800, 600) == (0.0, 0.0)

    def test_identity_scales_by_half_viewport(self):
        x, y = project_point((0.5, -0.5, 0.0), np.eye(4), 200, 100)
        assert x == pytest.approx(50.0)
        assert y == pytest.approx(-25.0)

    def test_no_clipping(self):
        x, y = project_point((3.0, 0.0, 0.0), np.eye(4), 200, 100)
        assert x == pytest.approx(300.0)

    def test_look_at_projects_to_centre(self):
        camera = Camera(position=(3.5, 3.0, 7.0), look_at=(1.0, 0.5, 0.0), aspect=1.5)
        x, y = project_point(camera.look_at, camera.view_projection_matrix(), 900, 600)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_perspective_up_is_positive_y(self):
        camera = Camera(position=(0.0, 0.0, 10.0), look_at=(0.0, 0.0, 0.0))
        _, y = project_point((0.0, 1.0, 0.0), camera.view_projection_matrix(), 100, 100)
        assert y > 0.0

    def test_nearer_points_spread_wider(self):
        camera = Camera(position=(0.0, 0.0, 10.0), look_at=(0.0, 0.0, 0.0))
        vp = camera.view_projection_matrix()
        far_x, _ = project_point((1.0, 0.0, -5.0), vp, 100, 100)
        near_x, _ = project_point((1.0, 0.0, 5.0), vp, 100, 100)
        assert near_x > far_x > 0.0

    def test_camera_looking_straight_down(self):
        camera = Camera(position=(0.0, 10.0, 0.0), look_at=(0.0, 0.0, 0.0))
        vp = camera.view_projection_matrix()
        assert np.all(np.isfinite(vp))
        assert project_point((0.0, 0.0, 0.0), vp, 100, 100) == pytest.approx((0.0, 0.0))


class TestProjectPaths:
    """Polyline assembly from hatch paths."""

    def test_single_segment_path(self, camera):
        path = HatchPath(segments=[seg((0, 0, 0), (1, 0, 0))])
        polylines = project_paths([path], camera, 400, 300)
        assert len(polylines) == 1
        assert len(polylines[0]) == 2

    def test_multi_segment_path(self, camera):
        path = HatchPath(segments=[
            seg((0, 0, 0), (1, 0, 0)),
            seg((1, 0, 0), (1, 1, 0)),
            seg((1, 1, 0), (0, 1, 0)),
        ])
        polylines = project_paths([path], camera, 400, 300)
        assert len(polylines[0]) == 4

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            HatchPath(segments=[])


class TestSummary:
    """Shapely-based drawing statistics."""

    def test_length_and_bounds(self):
        summary = summarize_projection([[(0, 0), (3, 4)], [(0, 0), (0, 1)]])
        assert summary.polyline_count == 2
        assert summary.total_length == pytest.approx(6.0)
        assert summary.bounds == pytest.approx((0.0, 0.0, 3.0, 4.0))

    def test_empty(self):
        summary = summarize_projection([])
        assert summary.polyline_count == 0
        assert summary.total_length == 0.0
        assert summary.bounds is None

    def test_hull_area(self):
        summary = summarize_projection([[(0, 0), (3, 4)], [(0, 0), (0, 1)]])
        assert summary.hull_area == pytest.approx(1.5)

    def test_collinear_hull_has_no_area(self):
        summary = summarize_projection([[(0, 0), (1, 0)], [(2, 0), (5, 0)]])
        assert summary.hull_area == pytest.approx(0.0)
