"""
Core vector and plane algebra for the hatching engine.

Built on numpy. Provides normalization, triangle normals, planes, bounded
and unbounded line/plane intersection, and the coplanar-line and
point-on-segment primitives. All functions are total: degenerate input
returns ``None`` / ``False`` / an empty list instead of raising.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from trimesh import transformations

# Squared cross-product length below which a triangle is treated as degenerate.
DEGENERATE_AREA_SQ = 1e-4


def as_vec3(v: Sequence[float]) -> np.ndarray:
    """Convert any 3-sequence to a float64 (3,) array."""
    return np.asarray(v, dtype=np.float64).reshape(3)


def length_sq(v: np.ndarray) -> float:
    return float(np.dot(v, v))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector in the direction of *v*, or the zero vector if degenerate."""
    n = float(np.linalg.norm(v))
    if n <= 1e-12:
        return np.zeros(3)
    return v / n


def triangle_normal(tri: np.ndarray) -> Optional[np.ndarray]:
    """Unit normal of a (3, 3) triangle, or None when its area is ~zero."""
    c = np.cross(tri[1] - tri[0], tri[2] - tri[0])
    if length_sq(c) < DEGENERATE_AREA_SQ:
        return None
    return c / np.linalg.norm(c)


def triangle_centroid(tri: np.ndarray) -> np.ndarray:
    return tri.mean(axis=0)


def barycentric(p: np.ndarray, tri: np.ndarray) -> Optional[np.ndarray]:
    """Barycentric coordinates (u, v, w) of *p* projected onto *tri*'s plane."""
    v0 = tri[1] - tri[0]
    v1 = tri[2] - tri[0]
    v2 = p - tri[0]
    d00 = float(np.dot(v0, v0))
    d01 = float(np.dot(v0, v1))
    d11 = float(np.dot(v1, v1))
    d20 = float(np.dot(v2, v0))
    d21 = float(np.dot(v2, v1))
    denom = d00 * d11 - d01 * d01
    if abs(denom) < 1e-18:
        return None
    v = (d11 * d20 - d01 * d21) / denom
    w = (d00 * d21 - d01 * d20) / denom
    return np.array([1.0 - v - w, v, w])


def rotate_about_axis(v: np.ndarray, axis: np.ndarray, angle_deg: float) -> np.ndarray:
    """Rotate *v* about *axis* (through the origin) by *angle_deg*."""
    rot = transformations.rotation_matrix(np.radians(angle_deg), axis)
    return rot[:3, :3] @ v


# ─── Planes ──────────────────────────────────────────────────────────────────

@dataclass
class Plane:
    """An oriented plane through ``point`` with unit ``normal``."""
    normal: np.ndarray   # (3,) unit normal
    point: np.ndarray    # (3,) any point on the plane

    @classmethod
    def from_normal_and_point(cls, normal, point) -> "Plane":
        return cls(normal=normalize(as_vec3(normal)), point=as_vec3(point))

    @classmethod
    def from_points(cls, a, b, c) -> Optional["Plane"]:
        """Plane through three points; None when they are collinear."""
        a, b, c = as_vec3(a), as_vec3(b), as_vec3(c)
        n = np.cross(b - a, c - a)
        if length_sq(n) < 1e-18:
            return None
        return cls(normal=n / np.linalg.norm(n), point=a)

    @property
    def offset(self) -> float:
        """Signed distance of the plane from the origin (n . p = d)."""
        return float(np.dot(self.normal, self.point))

    def signed_distance(self, p: np.ndarray) -> float:
        return float(np.dot(self.normal, p - self.point))


def intersect_line_plane(
    origin: np.ndarray,
    direction: np.ndarray,
    plane: Plane,
    eps: float = 1e-12,
) -> Optional[np.ndarray]:
    """Intersection of an infinite line with a plane, None if parallel."""
    denom = float(np.dot(plane.normal, direction))
    if abs(denom) < eps:
        return None
    t = float(np.dot(plane.normal, plane.point - origin)) / denom
    return origin + t * direction


def intersect_segment_plane(
    a: np.ndarray,
    b: np.ndarray,
    plane: Plane,
    eps: float = 1e-9,
) -> List[np.ndarray]:
    """Intersect the bounded segment a-b with *plane*.

    Returns both endpoints when the segment lies in the plane, the single
    crossing point when it crosses, and an empty list otherwise.
    """
    da = plane.signed_distance(a)
    db = plane.signed_distance(b)
    if abs(da) <= eps and abs(db) <= eps:
        return [a.copy(), b.copy()]
    if (da > eps and db > eps) or (da < -eps and db < -eps):
        return []
    if abs(da) <= eps:
        return [a.copy()]
    if abs(db) <= eps:
        return [b.copy()]

    p = intersect_line_plane(a, b - a, plane)
    if p is None or not point_on_segment(p, a, b, 1e-6):
        return []
    return [p]


# ─── Coplanar lines and segments ─────────────────────────────────────────────

def intersect_coplanar_lines(
    p1: np.ndarray,
    d1: np.ndarray,
    p2: np.ndarray,
    d2: np.ndarray,
    eps: float = 1e-6,
) -> Optional[np.ndarray]:
    """Intersection point of two lines assumed to be coplanar.

    Returns None when the lines are parallel (squared cross product of the
    normalized directions below eps²) or the closest-point solve is
    numerically degenerate.
    """
    u1 = normalize(as_vec3(d1))
    u2 = normalize(as_vec3(d2))
    if length_sq(np.cross(u1, u2)) < eps * eps:
        return None

    # Closest points p1 + t*u1 and p2 + s*u2 (least squares).
    w0 = as_vec3(p1) - as_vec3(p2)
    a = float(np.dot(u1, u1))
    b = float(np.dot(u1, u2))
    c = float(np.dot(u2, u2))
    d = float(np.dot(u1, w0))
    e = float(np.dot(u2, w0))
    denom = a * c - b * b
    if denom < eps * eps:
        return None
    t = (b * e - c * d) / denom
    return as_vec3(p1) + t * u1


def point_on_segment(
    p: np.ndarray,
    a: np.ndarray,
    b: np.ndarray,
    eps: float = 1e-6,
) -> bool:
    """True iff *p* is collinear with a-b and projects inside the segment."""
    ab = b - a
    ap = p - a
    ab_sq = length_sq(ab)
    if ab_sq < 1e-24:
        return length_sq(ap) <= eps * eps
    if length_sq(np.cross(ab, ap)) > eps * eps * ab_sq:
        return False
    t = float(np.dot(ap, ab))
    return -eps <= t <= ab_sq + eps
