"""
Shared test fixtures for the hatching engine tests.
"""
import json
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scene_types import Camera, DirectionalLight, Mesh, Spotlight


def make_grid_plane(half_size: float = 1.0, cells: int = 1, z: float = 0.0) -> Mesh:
    """Square plane [-half_size, half_size]^2 at height z, normal +Z.

    Each grid cell is split into two triangles.
    """
    xs = np.linspace(-half_size, half_size, cells + 1)
    tris = []
    for j in range(cells):
        for i in range(cells):
            v00 = (xs[i], xs[j], z)
            v10 = (xs[i + 1], xs[j], z)
            v01 = (xs[i], xs[j + 1], z)
            v11 = (xs[i + 1], xs[j + 1], z)
            tris.append([v00, v10, v11])
            tris.append([v00, v11, v01])
    return Mesh(triangles=np.array(tris), name=f"grid_{cells}")


def flipped(mesh: Mesh) -> Mesh:
    """Same triangles with reversed winding (normals flipped)."""
    return Mesh(triangles=mesh.triangles[:, ::-1, :].copy(), name=mesh.name + "_flipped")


@pytest.fixture
def quad_mesh():
    """The 2x2 quad [(-1,-1,0),(1,-1,0),(1,1,0),(-1,1,0)] as two triangles."""
    return Mesh(
        triangles=np.array([
            [(-1.0, -1.0, 0.0), (1.0, -1.0, 0.0), (1.0, 1.0, 0.0)],
            [(-1.0, -1.0, 0.0), (1.0, 1.0, 0.0), (-1.0, 1.0, 0.0)],
        ]),
        name="quad",
    )


@pytest.fixture
def top_light():
    """Directional light straight down the -Z axis."""
    return DirectionalLight(
        position=(0.0, 0.0, 5.0),
        target=(0.0, 0.0, 0.0),
        hatch_angle_deg=0.0,
        intensity=0.5,
    )


@pytest.fixture
def top_spotlight():
    """Spotlight 5 units above the origin with a 30 degree half-angle."""
    return Spotlight(
        position=(0.0, 0.0, 5.0),
        target=(0.0, 0.0, 0.0),
        intensity=1.0,
        cone_half_angle_deg=30.0,
    )


@pytest.fixture
def camera():
    """Camera looking at the origin from +Z."""
    return Camera(position=(0.0, 0.0, 10.0), look_at=(0.0, 0.0, 0.0), aspect=4 / 3)


@pytest.fixture
def scene_file(tmp_path: Path) -> str:
    """A small JSON scene: one box, one directional light, one spotlight."""
    data = {
        "camera": {"position": [3.0, 3.0, 6.0], "look_at": [0.0, 0.0, 0.0], "fov_deg": 45},
        "objects": [
            {"kind": "box", "name": "crate", "params": {"width": 1, "height": 1, "depth": 1}},
        ],
        "lights": [
            {"type": "directional", "position": [3, 5, 4], "target": [0, 0, 0],
             "hatch_angle_deg": 45, "intensity": 0.8},
            {"type": "spotlight", "position": [0, 4, 0], "target": [0, 0, 0],
             "intensity": 0.5, "cone_half_angle_deg": 40},
        ],
    }
    path = tmp_path / "still_life.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)
