"""
DXF export for pen-plotter hatch drawings.

Uses ezdxf to write the projected hatch paths as LWPOLYLINE entities on a
single layer. DXF is Y-up, so the projected coordinates (origin at the
page centre, Y up) are written unchanged. Format: R2010.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

import ezdxf

from path_projection import project_paths
from scene_types import Camera, HatchPath

logger = logging.getLogger(__name__)


@dataclass
class DXFExportConfig:
    """Configuration for DXF export."""
    hatch_layer: str = "HATCH"
    frame_layer: str = "FRAME"
    hatch_color: int = 7     # ACI white/black
    frame_color: int = 8     # ACI grey
    add_frame: bool = True


def export_to_dxf(
    paths: Sequence[HatchPath],
    camera: Camera,
    width: int,
    height: int,
    filepath: str,
    config: Optional[DXFExportConfig] = None,
) -> str:
    """Export projected hatch paths to a DXF file.

    Args:
        paths: Hatch paths in world space.
        camera: Camera used for projection.
        width: Page width in drawing units.
        height: Page height in drawing units.
        filepath: Output DXF file path.
        config: DXF export settings.

    Returns:
        Path to created DXF file.
    """
    if config is None:
        config = DXFExportConfig()

    doc = ezdxf.new("R2010")
    msp = doc.modelspace()
    _setup_layers(doc, config)

    count = 0
    for polyline in project_paths(paths, camera, width, height):
        if len(polyline) < 2:
            continue
        msp.add_lwpolyline(polyline, dxfattribs={"layer": config.hatch_layer})
        count += 1

    if config.add_frame:
        hw, hh = width / 2.0, height / 2.0
        msp.add_lwpolyline(
            [(-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)],
            close=True,
            dxfattribs={"layer": config.frame_layer},
        )

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info("Exported DXF: %s (%d polylines)", filepath, count)
    return filepath


def _setup_layers(doc, config: DXFExportConfig) -> None:
    doc.layers.add(config.hatch_layer, color=config.hatch_color)
    doc.layers.add(config.frame_layer, color=config.frame_color)
