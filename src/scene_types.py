"""
Data model for the hatching engine.

Meshes are triangle soups already in world space, lights are a closed set
of frozen dataclasses, and the camera produces the world-to-clip matrix
used by the exporters. Every value here is transient: the engine builds
nothing persistent out of them.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np

from geometry_primitives import as_vec3, normalize


class GeometryRole(Enum):
    """Whether a mesh takes part in hatching."""
    SUBJECT = "subject"
    HELPER = "helper"   # grids, gizmos, light markers


@dataclass
class Mesh:
    """World-space triangles of one scene object.

    ``triangles`` has shape (N, 3, 3): N triangles of vertices vA, vB, vC.
    """
    triangles: np.ndarray
    role: GeometryRole = GeometryRole.SUBJECT
    name: str = "mesh"

    def __post_init__(self):
        tris = np.asarray(self.triangles, dtype=np.float64)
        if tris.size == 0:
            tris = tris.reshape(0, 3, 3)
        self.triangles = tris.reshape(-1, 3, 3)

    @property
    def is_helper(self) -> bool:
        return self.role is GeometryRole.HELPER

    @property
    def vertices(self) -> np.ndarray:
        return self.triangles.reshape(-1, 3)

    def bounds(self) -> Optional[np.ndarray]:
        """(2, 3) axis-aligned bounds, or None for an empty mesh."""
        if len(self.triangles) == 0:
            return None
        verts = self.vertices
        return np.array([verts.min(axis=0), verts.max(axis=0)])

    @classmethod
    def from_trimesh(cls, mesh, role: GeometryRole = GeometryRole.SUBJECT,
                     name: str = "mesh") -> "Mesh":
        """Wrap a trimesh.Trimesh (vertices already world space)."""
        return cls(triangles=np.array(mesh.triangles, dtype=np.float64),
                   role=role, name=name)


# ─── Lights ──────────────────────────────────────────────────────────────────

def _check_intensity(intensity: float) -> None:
    if not intensity > 0.0:
        raise ValueError(f"Light intensity must be positive, got {intensity}")


@dataclass(frozen=True)
class DirectionalLight:
    """Parallel rays travelling from ``position`` toward ``target``."""
    position: Tuple[float, float, float]
    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    hatch_angle_deg: float = 0.0
    intensity: float = 1.0
    name: str = "directional"

    def __post_init__(self):
        _check_intensity(self.intensity)


@dataclass(frozen=True)
class Spotlight:
    """Cone-limited light with apex ``position`` aimed at ``target``."""
    position: Tuple[float, float, float]
    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    hatch_angle_deg: float = 0.0
    intensity: float = 1.0
    cone_half_angle_deg: float = 30.0
    name: str = "spotlight"

    def __post_init__(self):
        _check_intensity(self.intensity)
        if not 0.0 < self.cone_half_angle_deg < 90.0:
            raise ValueError(
                f"Cone half-angle must be in (0, 90) degrees, "
                f"got {self.cone_half_angle_deg}"
            )


Light = Union[DirectionalLight, Spotlight]


# ─── Hatch output ────────────────────────────────────────────────────────────

@dataclass(eq=False)
class HatchLineSegment:
    """A chord of one triangle produced for one light."""
    start: np.ndarray
    end: np.ndarray

    @property
    def length_sq(self) -> float:
        d = self.end - self.start
        return float(np.dot(d, d))

    def as_tuple(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        return (tuple(float(c) for c in self.start),
                tuple(float(c) for c in self.end))


@dataclass(eq=False)
class HatchPath:
    """An ordered, non-empty polyline of segments.

    ``light_index`` and ``line_index`` record which light and which master
    scan line (1-based) produced the path.
    """
    segments: List[HatchLineSegment]
    light_index: int = 0
    line_index: int = 0

    def __post_init__(self):
        if not self.segments:
            raise ValueError("HatchPath needs at least one segment")

    def points(self) -> List[np.ndarray]:
        """Start of the first segment followed by every segment end."""
        pts = [self.segments[0].start]
        pts.extend(seg.end for seg in self.segments)
        return pts


# ─── Camera ──────────────────────────────────────────────────────────────────

@dataclass
class Camera:
    """Perspective camera producing a world-to-clip (projection x view) matrix."""
    position: Tuple[float, float, float] = (3.5, 3.0, 7.0)
    look_at: Tuple[float, float, float] = (1.0, 0.5, 0.0)
    fov_deg: float = 50.0
    near: float = 0.1
    far: float = 1000.0
    aspect: float = 1.0
    up: Tuple[float, float, float] = field(default=(0.0, 1.0, 0.0))

    def view_matrix(self) -> np.ndarray:
        """World-to-camera matrix (camera looks down its local -Z)."""
        eye = as_vec3(self.position)
        forward = normalize(as_vec3(self.look_at) - eye)
        if not forward.any():
            forward = np.array([0.0, 0.0, -1.0])
        up = normalize(as_vec3(self.up))
        right = np.cross(forward, up)
        if float(np.dot(right, right)) < 1e-12:
            # Looking straight along the up vector.
            right = np.cross(forward, np.array([0.0, 0.0, 1.0]))
            if float(np.dot(right, right)) < 1e-12:
                right = np.cross(forward, np.array([1.0, 0.0, 0.0]))
        right = normalize(right)
        true_up = np.cross(right, forward)

        view = np.eye(4)
        view[0, :3] = right
        view[1, :3] = true_up
        view[2, :3] = -forward
        view[:3, 3] = -view[:3, :3] @ eye
        return view

    def projection_matrix(self) -> np.ndarray:
        """OpenGL-style perspective projection into clip space."""
        f = 1.0 / np.tan(np.radians(self.fov_deg) / 2.0)
        near, far = self.near, self.far
        proj = np.zeros((4, 4))
        proj[0, 0] = f / self.aspect
        proj[1, 1] = f
        proj[2, 2] = (far + near) / (near - far)
        proj[2, 3] = 2.0 * far * near / (near - far)
        proj[3, 2] = -1.0
        return proj

    def view_projection_matrix(self) -> np.ndarray:
        return self.projection_matrix() @ self.view_matrix()
