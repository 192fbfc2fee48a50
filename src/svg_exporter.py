"""
SVG exporter for hatch paths.

Generates a plotter-ready SVG: one polyline per hatch path, drawn inside a
group that moves the origin to the centre of the page and flips Y so the
projected coordinates keep Y pointing up.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

import svgwrite

from path_projection import project_paths
from scene_types import Camera, HatchPath

logger = logging.getLogger(__name__)


@dataclass
class SVGExportConfig:
    """Styling for exported hatch drawings."""
    stroke_color: str = "#ffffff"      # foreground colour from the caller's theme
    stroke_width: float = 1.0
    background_color: str = "#333333"


def export_to_vector_format(
    paths: Sequence[HatchPath],
    camera: Camera,
    width: int,
    height: int,
    config: Optional[SVGExportConfig] = None,
) -> str:
    """
    Serialize hatch paths as a self-contained SVG document.

    Args:
        paths: Hatch paths in world space
        camera: Camera whose view-projection maps world to NDC
        width: Document width in pixels
        height: Document height in pixels
        config: Stroke and background styling

    Returns:
        SVG document text sized exactly width x height
    """
    if config is None:
        config = SVGExportConfig()

    dwg = svgwrite.Drawing(
        size=(width, height),
        style=f"background-color: {config.background_color};",
    )

    frame = dwg.g()
    frame.translate(width / 2, height / 2)
    frame.scale(1, -1)

    for polyline in project_paths(paths, camera, width, height):
        if len(polyline) < 2:
            continue
        frame.add(dwg.polyline(
            polyline,
            stroke=config.stroke_color,
            stroke_width=config.stroke_width,
            fill="none",
        ))

    dwg.add(frame)
    return dwg.tostring()


def save_svg(svg_text: str, filepath: str) -> str:
    """Write SVG text to *filepath*, creating parent directories."""
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(svg_text)
    logger.info("Exported SVG: %s", filepath)
    return filepath
