"""
Hatch line generation.

For every light, sweeps a family of cutting planes across the lit geometry
and intersects each plane with the edges of every lit triangle. Each chord
becomes a single-segment HatchPath.

Algorithm per light:
1. Ray direction d (position -> target).
2. Reference point p0 = centre of the union bounding box of subject meshes.
3. Hatch direction h perpendicular to d, rotated by the hatch angle.
4. Scan direction s = normalize(h x d).
5. Scan range from projecting all subject vertices onto s.
6. Master line count from intensity (and scan range for directional lights).
7. One cutting plane per master line: parallel slabs for directional
   lights, radial slices through the apex for spotlights.
8. Intersect every lit triangle's edges with the plane; two distinct
   points make a segment.

The function is pure: identical inputs give identical output.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from geometry_primitives import Plane, intersect_segment_plane, length_sq
from illumination import (
    HatchBasis,
    classify_triangle,
    hatch_basis,
    point_in_spot_cone,
    required_alignment,
)
from scene_types import (
    Camera,
    DirectionalLight,
    HatchLineSegment,
    HatchPath,
    Mesh,
    Spotlight,
)

logger = logging.getLogger(__name__)


@dataclass
class HatchConfig:
    """Tunable constants for hatch generation."""
    density_factor: float = 20.0            # master lines per unit scan range per unit intensity
    spotlight_min_lines: int = 5
    spotlight_lines_per_intensity: float = 20.0
    spotlight_near_distance: float = 0.1
    min_scan_range: float = 1e-3
    dedupe_eps_sq: float = 1e-12
    min_segment_length_sq: float = 1e-4
    plane_eps: float = 1e-9


@dataclass
class _LitSet:
    """Triangles lit by one light and their effective alignments."""
    triangles: np.ndarray   # (M, 3, 3)
    alignment: np.ndarray   # (M,)


def generate_hatch_lines(
    meshes: Sequence[Mesh],
    lights: Sequence,
    camera: Optional[Camera] = None,
    config: Optional[HatchConfig] = None,
) -> List[HatchPath]:
    """Generate hatch paths for all lights over all subject meshes.

    The camera is not needed to place hatching; it is accepted so callers
    can hand over the whole scene in one call.

    Returns:
        List of single-segment HatchPath, grouped by light then master line.
    """
    if config is None:
        config = HatchConfig()

    subjects = [m for m in meshes if not m.is_helper and len(m.triangles) > 0]
    if not subjects or not lights:
        return []
    triangles = np.concatenate([m.triangles for m in subjects], axis=0)

    paths: List[HatchPath] = []
    for light_index, light in enumerate(lights):
        if not isinstance(light, (DirectionalLight, Spotlight)):
            logger.debug("Skipping unsupported light type %s", type(light).__name__)
            continue
        light_paths = _hatch_light(triangles, light, light_index, config)
        logger.debug("Light %d (%s): %d paths", light_index, light.name, len(light_paths))
        paths.extend(light_paths)

    logger.info("Generated %d hatch paths for %d light(s)", len(paths), len(lights))
    return paths


def master_line_count(light, scan_range: float, config: Optional[HatchConfig] = None) -> int:
    """Number of master scan lines for *light* over *scan_range*."""
    if config is None:
        config = HatchConfig()
    if isinstance(light, Spotlight):
        return max(
            config.spotlight_min_lines,
            int(math.floor(light.intensity * config.spotlight_lines_per_intensity)),
        )
    return max(1, int(math.floor(light.intensity * scan_range * config.density_factor)))


# ─── Per-light sweep ─────────────────────────────────────────────────────────

def _hatch_light(
    triangles: np.ndarray,
    light,
    light_index: int,
    config: HatchConfig,
) -> List[HatchPath]:
    bounds_min = triangles.reshape(-1, 3).min(axis=0)
    bounds_max = triangles.reshape(-1, 3).max(axis=0)
    if not np.all(np.isfinite(bounds_min)) or not np.all(np.isfinite(bounds_max)):
        return []
    p0 = (bounds_min + bounds_max) / 2.0

    basis = hatch_basis(light)
    if basis is None:
        return []

    min_scan, max_scan = _scan_range(triangles, p0, basis)
    scan_range = max_scan - min_scan
    if scan_range < config.min_scan_range:
        logger.debug("Light %s: scan range %.6f too small", light.name, scan_range)
        return []

    lit = _lit_triangles(triangles, light)
    if len(lit.triangles) == 0:
        return []

    n_lines = master_line_count(light, scan_range, config)
    paths: List[HatchPath] = []
    for line_index in range(1, n_lines + 1):
        if isinstance(light, Spotlight):
            plane = _spot_cutting_plane(light, basis, line_index, n_lines, config)
        else:
            offset = min_scan + line_index * scan_range / (n_lines + 1)
            plane = Plane(normal=basis.scan, point=p0 + offset * basis.scan)
        if plane is None:
            continue

        threshold = required_alignment(line_index)
        for segment in _cut_lit_triangles(lit, plane, threshold, light, basis, config):
            paths.append(HatchPath(
                segments=[segment],
                light_index=light_index,
                line_index=line_index,
            ))
    return paths


def _scan_range(triangles: np.ndarray, p0: np.ndarray, basis: HatchBasis):
    """Min/max scan coordinate of all vertices projected onto the p0 plane."""
    verts = triangles.reshape(-1, 3)
    rel = verts - p0
    # Drop the ray component so the scan is measured in the plane normal to d.
    projected = rel - np.outer(rel @ basis.ray, basis.ray)
    scans = projected @ basis.scan
    return float(scans.min()), float(scans.max())


def _lit_triangles(triangles: np.ndarray, light) -> _LitSet:
    keep = []
    alignment = []
    for idx, tri in enumerate(triangles):
        a = classify_triangle(light, tri)
        if a is None:
            continue
        keep.append(idx)
        alignment.append(a)
    return _LitSet(
        triangles=triangles[keep] if keep else np.zeros((0, 3, 3)),
        alignment=np.array(alignment, dtype=np.float64),
    )


def _spot_cutting_plane(
    light: Spotlight,
    basis: HatchBasis,
    line_index: int,
    n_lines: int,
    config: HatchConfig,
) -> Optional[Plane]:
    """Radial slice through the apex and two symmetric near-plane points."""
    apex = np.asarray(light.position, dtype=np.float64)
    near = config.spotlight_near_distance
    radius = near * math.tan(math.radians(light.cone_half_angle_deg))
    offset = -radius + line_index * (2.0 * radius) / (n_lines + 1)
    centre = apex + near * basis.ray + offset * basis.scan
    return Plane.from_points(
        apex,
        centre + radius * basis.hatch,
        centre - radius * basis.hatch,
    )


def _cut_lit_triangles(
    lit: _LitSet,
    plane: Plane,
    threshold: float,
    light,
    basis: HatchBasis,
    config: HatchConfig,
) -> List[HatchLineSegment]:
    # Cheap straddle test before per-edge work.
    dists = (lit.triangles - plane.point) @ plane.normal      # (M, 3)
    eps = config.plane_eps
    straddles = (dists.min(axis=1) <= eps) & (dists.max(axis=1) >= -eps)
    candidates = np.nonzero(straddles & (lit.alignment >= threshold))[0]

    segments: List[HatchLineSegment] = []
    for idx in candidates:
        segment = _cut_triangle(lit.triangles[idx], plane, light, basis, config)
        if segment is not None:
            segments.append(segment)
    return segments


def _cut_triangle(
    tri: np.ndarray,
    plane: Plane,
    light,
    basis: HatchBasis,
    config: HatchConfig,
) -> Optional[HatchLineSegment]:
    points: List[np.ndarray] = []
    for a, b in ((tri[0], tri[1]), (tri[1], tri[2]), (tri[2], tri[0])):
        for p in intersect_segment_plane(a, b, plane, config.plane_eps):
            if isinstance(light, Spotlight) and not point_in_spot_cone(
                light, p, config.spotlight_near_distance
            ):
                continue
            if any(length_sq(p - q) < config.dedupe_eps_sq for q in points):
                continue
            points.append(p)

    if len(points) < 2:
        return None
    if len(points) > 2:
        points.sort(key=lambda p: float(np.dot(p, basis.hatch)))
        points = [points[0], points[-1]]

    segment = HatchLineSegment(start=points[0], end=points[1])
    if segment.length_sq < config.min_segment_length_sq:
        return None
    return segment
