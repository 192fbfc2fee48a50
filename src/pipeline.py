"""Single-path pipeline: scene -> hatch paths -> SVG/DXF run artifacts."""

from __future__ import annotations

import logging
import os
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional

from dxf_exporter import DXFExportConfig, export_to_dxf
from hatch_generator import HatchConfig
from path_projection import ProjectionSummary, project_paths, summarize_projection
from run_protocol import (
    copy_input,
    light_records,
    prepare_run_dir,
    update_latest_pointer,
    write_report,
)
from scene import Scene, load_scene
from svg_exporter import SVGExportConfig, export_to_vector_format, save_svg

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    runs_dir: str = "runs"
    width: int = 800
    height: int = 600
    export_svg: bool = True
    export_dxf: bool = True
    svg: SVGExportConfig = field(default_factory=SVGExportConfig)
    dxf: DXFExportConfig = field(default_factory=DXFExportConfig)
    hatch: Optional[HatchConfig] = None


@dataclass
class PipelineResult:
    run_id: str
    run_dir: str
    metrics_path: str
    summary_path: str
    manifest_path: str
    path_count: int
    svg_path: Optional[str] = None
    dxf_path: Optional[str] = None
    paths_per_light: Dict[int, int] = field(default_factory=dict)
    projection: Optional[ProjectionSummary] = None


def run_hatch_pipeline(
    scene_path: str,
    scene_name: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Hatch the scene file at *scene_path* and write a run folder."""
    scene = load_scene(scene_path)
    if scene_name is None:
        scene_name = os.path.splitext(os.path.basename(scene_path))[0]
    return run_hatch_pipeline_for_scene(scene, scene_name, config, input_path=scene_path)


def run_hatch_pipeline_for_scene(
    scene: Scene,
    scene_name: str = "scene",
    config: Optional[PipelineConfig] = None,
    input_path: Optional[str] = None,
) -> PipelineResult:
    if config is None:
        config = PipelineConfig()

    started = time.perf_counter()
    paths = prepare_run_dir(config.runs_dir, scene_name)
    copied_input = str(copy_input(input_path, paths.input_dir)) if input_path else None

    scene.update_camera(aspect=config.width / config.height)
    if config.hatch is not None:
        scene.hatch_config = config.hatch
        scene.is_dirty = True

    logger.info("Hatching scene %s (%d objects, %d lights)",
                scene_name, len(scene.objects), len(scene.lights))
    hatch_paths = scene.recompute()

    svg_path = None
    if config.export_svg:
        svg_text = export_to_vector_format(
            hatch_paths, scene.camera, config.width, config.height, config.svg,
        )
        svg_path = save_svg(svg_text, str(paths.artifact(scene_name, ".svg")))

    dxf_path = None
    if config.export_dxf:
        dxf_path = export_to_dxf(
            hatch_paths, scene.camera, config.width, config.height,
            str(paths.artifact(scene_name, ".dxf")), config.dxf,
        )

    projection = summarize_projection(
        project_paths(hatch_paths, scene.camera, config.width, config.height)
    )
    per_light = dict(sorted(Counter(p.light_index for p in hatch_paths).items()))
    elapsed = time.perf_counter() - started

    write_report(paths.metrics_path, {
        "run_id": paths.run_id,
        "elapsed_s": round(elapsed, 3),
        "counts": {
            "objects": len(scene.objects),
            "lights": len(scene.lights),
            "paths": len(hatch_paths),
            "paths_per_light": {str(k): v for k, v in per_light.items()},
        },
        "projection": asdict(projection),
    })

    summary = _build_summary(scene_name, paths.run_id, elapsed, len(hatch_paths),
                             per_light, projection)
    write_report(paths.summary_path, summary)
    write_report(paths.lights_path, light_records(scene.lights, per_light))

    write_report(paths.manifest_path, {
        "run_id": paths.run_id,
        "scene_name": scene_name,
        "input_scene": copied_input,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": {
            "width": config.width,
            "height": config.height,
            "svg": asdict(config.svg),
            "dxf": asdict(config.dxf),
            "hatch": asdict(scene.hatch_config or HatchConfig()),
        },
        "artifacts": {
            "svg": svg_path,
            "dxf": dxf_path,
            "metrics": str(paths.metrics_path),
            "lights": str(paths.lights_path),
            "summary": str(paths.summary_path),
        },
    })
    update_latest_pointer(config.runs_dir, paths.run_dir)

    return PipelineResult(
        run_id=paths.run_id,
        run_dir=str(paths.run_dir),
        metrics_path=str(paths.metrics_path),
        summary_path=str(paths.summary_path),
        manifest_path=str(paths.manifest_path),
        path_count=len(hatch_paths),
        svg_path=svg_path,
        dxf_path=dxf_path,
        paths_per_light=per_light,
        projection=projection,
    )


def _build_summary(
    scene_name: str,
    run_id: str,
    elapsed_s: float,
    path_count: int,
    per_light: Dict[int, int],
    projection: ProjectionSummary,
) -> str:
    lines = [
        f"# Run {run_id}",
        "",
        f"- Scene: {scene_name}",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Hatch paths: {path_count}",
        f"- Pen-down length: {projection.total_length:.1f}",
        f"- Hull area: {projection.hull_area:.1f}",
        "",
        "## Paths per light",
    ]
    if not per_light:
        lines.append("- None")
    for light_index, count in per_light.items():
        lines.append(f"- light {light_index}: {count}")
    return "\n".join(lines) + "\n"
