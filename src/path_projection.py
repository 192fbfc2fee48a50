"""
Projection of 3D hatch paths into 2D device coordinates.

Points go through the camera's projection x view matrix, are divided by
w, and are scaled by half the viewport size. The result is centred on the
origin with Y up; exporters wrap it in whatever frame their format needs.
No clipping is done: out-of-frame points are returned as-is.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import LineString, MultiLineString

from scene_types import Camera, HatchPath

Point2D = Tuple[float, float]


def project_point(
    point: Sequence[float],
    view_projection: np.ndarray,
    width: float,
    height: float,
) -> Point2D:
    """Project a world-space point to centred viewport coordinates."""
    hom = view_projection @ np.array([point[0], point[1], point[2], 1.0])
    w = hom[3]
    if abs(w) > 1e-12:
        ndc = hom[:3] / w
    else:
        ndc = hom[:3]
    return (float(ndc[0] * width / 2.0), float(ndc[1] * height / 2.0))


def project_paths(
    paths: Sequence[HatchPath],
    camera: Camera,
    width: float,
    height: float,
) -> List[List[Point2D]]:
    """One 2D polyline per path: first segment start, then every segment end."""
    view_projection = camera.view_projection_matrix()
    polylines = []
    for path in paths:
        polylines.append([
            project_point(p, view_projection, width, height) for p in path.points()
        ])
    return polylines


@dataclass
class ProjectionSummary:
    """2D statistics of a projected drawing."""
    polyline_count: int
    total_length: float
    bounds: Optional[Tuple[float, float, float, float]]  # (minx, miny, maxx, maxy)
    hull_area: float = 0.0


def summarize_projection(polylines: Sequence[Sequence[Point2D]]) -> ProjectionSummary:
    """Total pen-down length, bounds and convex-hull area of projected polylines."""
    lines = [LineString(pts) for pts in polylines if len(pts) >= 2]
    if not lines:
        return ProjectionSummary(polyline_count=0, total_length=0.0, bounds=None)
    multi = MultiLineString(lines)
    return ProjectionSummary(
        polyline_count=len(lines),
        total_length=float(multi.length),
        bounds=tuple(float(v) for v in multi.bounds),
        hull_area=float(multi.convex_hull.area),
    )
