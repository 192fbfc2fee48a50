#!/usr/bin/env python3
"""
Generate pen-plotter hatching for a scene or a single mesh.

Usage:
    # From a JSON scene file (objects, lights, camera)
    python scripts/generate_hatching.py --scene scenes/still_life.json

    # From a mesh file, lit by the default key light
    python scripts/generate_hatching.py --mesh model.stl --width 1200 --height 900

Artifacts (SVG, DXF, metrics, summary) go to a timestamped folder under
--runs-dir.
"""
import sys
import argparse
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pipeline import PipelineConfig, run_hatch_pipeline, run_hatch_pipeline_for_scene
from scene import Scene, SceneFileError, SceneObject
from svg_exporter import SVGExportConfig


def main():
    parser = argparse.ArgumentParser(
        description="Generate pen-plotter hatching from a 3D scene"
    )
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("--scene", type=str, help="Path to a JSON scene file")
    input_group.add_argument("--mesh", type=str, help="Path to a mesh file (STL, OBJ, GLB, PLY)")

    parser.add_argument("--name", type=str, default=None, help="Run name (default: input stem)")
    parser.add_argument("--width", type=int, default=800, help="Output width (default: 800)")
    parser.add_argument("--height", type=int, default=600, help="Output height (default: 600)")
    parser.add_argument("--runs-dir", type=str, default="runs", help="Root folder for run outputs")
    parser.add_argument("--no-dxf", action="store_true", help="Skip DXF export")
    parser.add_argument("--stroke-color", type=str, default="#ffffff",
                        help="SVG stroke colour (default: #ffffff)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")

    config = PipelineConfig(
        runs_dir=args.runs_dir,
        width=args.width,
        height=args.height,
        export_dxf=not args.no_dxf,
        svg=SVGExportConfig(stroke_color=args.stroke_color),
    )

    try:
        if args.scene:
            result = run_hatch_pipeline(args.scene, scene_name=args.name, config=config)
        else:
            mesh_path = Path(args.mesh)
            if not mesh_path.is_file():
                parser.error(f"Mesh file not found: {mesh_path}")
            scene = Scene.default()
            for object_id in list(scene.objects):
                scene.remove_object(object_id)
            scene.add_object(SceneObject(kind="mesh", mesh_path=str(mesh_path),
                                         name=mesh_path.stem))
            result = run_hatch_pipeline_for_scene(
                scene, args.name or mesh_path.stem, config, input_path=str(mesh_path),
            )
    except (FileNotFoundError, SceneFileError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Run ID: {result.run_id}")
    print(f"Run dir: {result.run_dir}")
    print(f"Hatch paths: {result.path_count}")
    if result.svg_path:
        print(f"SVG: {result.svg_path}")
    if result.dxf_path:
        print(f"DXF: {result.dxf_path}")


if __name__ == "__main__":
    main()
