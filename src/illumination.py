"""
Illumination classification for hatching.

Decides, per (light, triangle) pair, whether the triangle faces the light
and how strongly ("effective alignment"), and builds the hatch/scan basis
each light sweeps its cutting planes along.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from geometry_primitives import (
    as_vec3,
    length_sq,
    normalize,
    rotate_about_axis,
    triangle_centroid,
    triangle_normal,
)
from scene_types import DirectionalLight, Spotlight

logger = logging.getLogger(__name__)

# A triangle must face the light by more than this (dot(n, d) < -FACING_EPS).
FACING_EPS = 0.01

# Alternating crosshatch density: even master lines only hatch strongly lit
# faces, odd lines also hatch near-grazing ones.
EVEN_LINE_ALIGNMENT = 0.5
ODD_LINE_ALIGNMENT = 0.1

_BASIS_AXES = (
    np.array([1.0, 0.0, 0.0]),
    np.array([0.0, 1.0, 0.0]),
    np.array([0.0, 0.0, 1.0]),
)


@dataclass
class HatchBasis:
    """Orthonormal frame for one light: ray, hatch-line and scan directions."""
    ray: np.ndarray
    hatch: np.ndarray
    scan: np.ndarray


def ray_direction(light) -> Optional[np.ndarray]:
    """Unit direction rays travel in (position -> target)."""
    d = as_vec3(light.target) - as_vec3(light.position)
    if length_sq(d) < 1e-18:
        return None
    return normalize(d)


def hatch_basis(light) -> Optional[HatchBasis]:
    """Hatch direction perpendicular to the ray, rotated by the hatch angle.

    Tries the world X, Y, Z axes in turn and projects the first usable one
    onto the plane perpendicular to the ray. An axis is skipped when it is
    within 0.99 of the ray or when its projection has squared length below
    0.1. Returns None when no stable basis exists.
    """
    d = ray_direction(light)
    if d is None:
        return None

    hatch = None
    for axis in _BASIS_AXES:
        if abs(float(np.dot(axis, d))) > 0.99:
            continue
        candidate = axis - float(np.dot(axis, d)) * d
        if length_sq(candidate) < 0.1:
            continue
        hatch = normalize(candidate)
        break
    if hatch is None:
        logger.debug("No stable hatch direction for light %s", light.name)
        return None

    hatch = normalize(rotate_about_axis(hatch, d, light.hatch_angle_deg))
    scan = np.cross(hatch, d)
    if length_sq(scan) < 0.1:
        logger.debug("Degenerate scan direction for light %s", light.name)
        return None
    return HatchBasis(ray=d, hatch=hatch, scan=normalize(scan))


def required_alignment(line_index: int) -> float:
    """Alignment a triangle needs on master line *line_index* (1-based)."""
    return EVEN_LINE_ALIGNMENT if line_index % 2 == 0 else ODD_LINE_ALIGNMENT


def is_lit_for_line(alignment: float, line_index: int) -> bool:
    return alignment >= required_alignment(line_index)


def angle_to_axis_deg(light: Spotlight, point: np.ndarray) -> Optional[float]:
    """Angle between (point - apex) and the spot axis, None at the apex."""
    d = ray_direction(light)
    v = point - as_vec3(light.position)
    if d is None or length_sq(v) < 1e-18:
        return None
    c = float(np.dot(normalize(v), d))
    return float(np.degrees(np.arccos(np.clip(c, -1.0, 1.0))))


def cone_attenuation(light: Spotlight, point: np.ndarray) -> float:
    """cos² of the angle to the spot axis; 0 outside the cone."""
    angle = angle_to_axis_deg(light, point)
    if angle is None or angle > light.cone_half_angle_deg:
        return 0.0
    return float(np.cos(np.radians(angle)) ** 2)


def point_in_spot_cone(light: Spotlight, point: np.ndarray,
                       near_distance: float) -> bool:
    """Point lies beyond the near distance along the axis and inside the cone."""
    d = ray_direction(light)
    if d is None:
        return False
    v = point - as_vec3(light.position)
    if float(np.dot(v, d)) <= near_distance:
        return False
    angle = angle_to_axis_deg(light, point)
    return angle is not None and angle <= light.cone_half_angle_deg + 1e-9


def classify_triangle(light, tri: np.ndarray) -> Optional[float]:
    """Effective alignment of *tri* under *light*, or None if not lit.

    Degenerate triangles, triangles facing away or edge-on, spotlight
    triangles whose centroid falls outside the cone, and unsupported light
    types all return None.
    """
    if not isinstance(light, (DirectionalLight, Spotlight)):
        return None
    n = triangle_normal(tri)
    d = ray_direction(light)
    if n is None or d is None:
        return None
    facing = float(np.dot(n, d))
    if facing >= -FACING_EPS:
        return None

    alignment = -facing
    if isinstance(light, Spotlight):
        attenuation = cone_attenuation(light, triangle_centroid(tri))
        if attenuation <= 0.0:
            return None
        alignment *= attenuation
    return alignment
