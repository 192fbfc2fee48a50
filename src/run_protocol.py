"""Run folders for hatching runs.

Each run gets ``<runs_root>/<stamp>_<scene-slug>/`` holding a copy of the
input scene or mesh, an ``artifacts/`` folder for SVG/DXF output, and
JSON/markdown reports. ``<runs_root>/latest`` points at the newest run.
"""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from scene_types import Light, Spotlight

LATEST_NAME = "latest"
LATEST_MARKER = "latest_run.txt"


@dataclass
class RunPaths:
    run_id: str
    run_dir: Path
    input_dir: Path
    artifacts_dir: Path
    manifest_path: Path
    metrics_path: Path
    lights_path: Path
    summary_path: Path

    def artifact(self, scene_name: str, suffix: str) -> Path:
        """Path for an exported drawing, e.g. ``artifact("still_life", ".svg")``."""
        return self.artifacts_dir / f"{slugify(scene_name)}{suffix}"


def slugify(value: str) -> str:
    value = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return value.strip("-") or "scene"


def create_run_id(scene_name: str) -> str:
    # Microseconds keep back-to-back runs of the same scene apart.
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    return f"{stamp}_{slugify(scene_name)}"


def prepare_run_dir(runs_root: str, scene_name: str) -> RunPaths:
    run_id = create_run_id(scene_name)
    run_dir = Path(runs_root) / run_id
    for sub in ("input", "artifacts"):
        (run_dir / sub).mkdir(parents=True, exist_ok=True)

    return RunPaths(
        run_id=run_id,
        run_dir=run_dir,
        input_dir=run_dir / "input",
        artifacts_dir=run_dir / "artifacts",
        manifest_path=run_dir / "manifest.json",
        metrics_path=run_dir / "metrics.json",
        lights_path=run_dir / "lights.json",
        summary_path=run_dir / "summary.md",
    )


def copy_input(path: str, input_dir: Path) -> Path:
    """Copy a scene file or mesh file into the run's ``input/`` folder."""
    src = Path(path)
    dst = input_dir / src.name
    if src.resolve() != dst.resolve():
        shutil.copy2(src, dst)
    return dst


def light_records(
    lights: Mapping[str, Light],
    paths_per_light: Mapping[int, int],
) -> List[Dict[str, Any]]:
    """One JSON-ready entry per light, in hatching order, with its path count."""
    records = []
    for index, (light_id, light) in enumerate(lights.items()):
        record: Dict[str, Any] = {
            "index": index,
            "id": light_id,
            "type": "spotlight" if isinstance(light, Spotlight) else "directional",
            "name": light.name,
            "position": list(light.position),
            "target": list(light.target),
            "intensity": light.intensity,
            "hatch_angle_deg": light.hatch_angle_deg,
            "paths": int(paths_per_light.get(index, 0)),
        }
        if isinstance(light, Spotlight):
            record["cone_half_angle_deg"] = light.cone_half_angle_deg
        records.append(record)
    return records


def write_report(path: Path, payload: Union[str, Mapping[str, Any], List[Any]]) -> Path:
    """Write text as-is and anything else as indented JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(payload, str):
        path.write_text(payload, encoding="utf-8")
    else:
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def update_latest_pointer(runs_root: str, run_dir: Path) -> Path:
    """Point ``<runs_root>/latest`` at *run_dir*.

    Uses a relative symlink; where symlinks are unavailable, ``latest`` is
    a folder holding a marker file with the run folder name.
    """
    runs_path = Path(runs_root)
    latest = runs_path / LATEST_NAME
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, runs_path))
    except OSError:
        latest.mkdir(parents=True, exist_ok=True)
        (latest / LATEST_MARKER).write_text(run_dir.name, encoding="utf-8")
    return latest


def resolve_latest(runs_root: str) -> Path:
    """Run folder that ``latest`` points at; FileNotFoundError when unset."""
    runs_path = Path(runs_root)
    latest = runs_path / LATEST_NAME
    if latest.is_symlink():
        return (runs_path / os.readlink(latest)).resolve()
    marker = latest / LATEST_MARKER
    if marker.is_file():
        return (runs_path / marker.read_text(encoding="utf-8").strip()).resolve()
    raise FileNotFoundError(f"No latest run recorded under {runs_root}")
