"""Tests for dxf_exporter module."""
import os

import ezdxf
import pytest

from dxf_exporter import DXFExportConfig, export_to_dxf
from hatch_generator import generate_hatch_lines


class TestExportToDXF:
    """DXF export of projected hatch paths."""

    def test_one_lwpolyline_per_path(self, quad_mesh, top_light, camera, tmp_path):
        paths = generate_hatch_lines([quad_mesh], [top_light], camera)
        filepath = str(tmp_path / "quad.dxf")
        result = export_to_dxf(paths, camera, 400, 300, filepath)

        assert result == filepath
        assert os.path.isfile(filepath)
        doc = ezdxf.readfile(filepath)
        hatch = doc.modelspace().query('LWPOLYLINE[layer=="HATCH"]')
        assert len(hatch) == len(paths)

    def test_frame_is_page_sized(self, quad_mesh, top_light, camera, tmp_path):
        paths = generate_hatch_lines([quad_mesh], [top_light], camera)
        filepath = str(tmp_path / "framed.dxf")
        export_to_dxf(paths, camera, 400, 300, filepath)

        doc = ezdxf.readfile(filepath)
        frames = doc.modelspace().query('LWPOLYLINE[layer=="FRAME"]')
        assert len(frames) == 1
        xs = [p[0] for p in frames[0].get_points("xy")]
        ys = [p[1] for p in frames[0].get_points("xy")]
        assert min(xs) == pytest.approx(-200.0)
        assert max(ys) == pytest.approx(150.0)

    def test_without_frame(self, camera, tmp_path):
        filepath = str(tmp_path / "empty.dxf")
        export_to_dxf([], camera, 100, 100, filepath, DXFExportConfig(add_frame=False))
        doc = ezdxf.readfile(filepath)
        assert len(doc.modelspace().query("LWPOLYLINE")) == 0
