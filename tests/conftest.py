from __future__ import annotations

from pathlib import Path

import pytest

SLIDE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     width="1280" height="720">
  <!-- title slide -->
  <g id="layer1" inkscape:label="Bullets" inkscape:groupmode="layer">
    <text id="b1" style="font-size:12px">First</text>
    <text id="b2" style="font-size:12px;display:none">Second</text>
    <text id="b3">Third</text>
  </g>
</svg>
"""


class RecordingRasterizer:
    """Stands in for Inkscape: records calls and writes a placeholder PNG."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, int, int]] = []

    def rasterize(self, svg_path: Path, png_path: Path, width: int, height: int) -> None:
        assert svg_path.exists()
        self.calls.append((svg_path, png_path, width, height))
        png_path.write_bytes(b"\x89PNG\r\n\x1a\n")


@pytest.fixture
def rasterizer() -> RecordingRasterizer:
    return RecordingRasterizer()


@pytest.fixture
def slide_svg(tmp_path: Path) -> Path:
    src = tmp_path / "in" / "slide.svg"
    src.parent.mkdir()
    src.write_text(SLIDE_SVG, encoding="utf-8")
    return src


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir()
    return d
