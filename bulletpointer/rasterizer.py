from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .config import DEFAULT_INKSCAPE_COMMAND, Settings
from .errors import RasterizeError, UsageError
from .utils import first_line, run_command

log = logging.getLogger(__name__)


class Rasterizer(Protocol):
    def rasterize(self, svg_path: Path, png_path: Path, width: int, height: int) -> None:
        """Render ``svg_path`` to ``png_path``; raise RasterizeError on failure."""


class InkscapeRasterizer:
    """Shells out to Inkscape (by default the Flatpak build)."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_INKSCAPE_COMMAND,
        timeout_sec: float | None = None,
    ):
        self.command = tuple(command)
        self.timeout_sec = timeout_sec

    def build_argv(self, svg_path: Path, png_path: Path, width: int, height: int) -> list[str]:
        return [
            *self.command,
            f"--export-filename={png_path}",
            f"--export-width={width}",
            f"--export-height={height}",
            str(svg_path),
        ]

    def rasterize(self, svg_path: Path, png_path: Path, width: int, height: int) -> None:
        argv = self.build_argv(svg_path, png_path, width, height)
        log.debug("Inkscape: %s -> %s (%dx%d)", svg_path, png_path, width, height)
        try:
            res = run_command(argv, timeout_sec=self.timeout_sec)
        except OSError as e:
            raise RasterizeError(f"Could not convert SVG to PNG with Inkscape: {e}") from e
        if res.returncode != 0:
            detail = first_line(res.stderr)
            msg = f"Could not convert SVG to PNG with Inkscape: exit status {res.returncode}"
            if detail:
                msg = f"{msg} ({detail})"
            raise RasterizeError(msg, returncode=res.returncode, stderr=res.stderr)


class CairoSvgRasterizer:
    """Renders in-process with CairoSVG; no external program needed."""

    def rasterize(self, svg_path: Path, png_path: Path, width: int, height: int) -> None:
        try:
            import cairosvg
        except (ImportError, OSError) as e:
            # OSError: the cairo shared library itself is missing
            raise RasterizeError(f"CairoSVG not available: {e}") from e
        log.debug("CairoSVG: %s -> %s (%dx%d)", svg_path, png_path, width, height)
        try:
            cairosvg.svg2png(
                url=str(svg_path),
                write_to=str(png_path),
                output_width=width,
                output_height=height,
            )
        except Exception as e:
            raise RasterizeError(f"Could not convert SVG to PNG with CairoSVG: {e}") from e


def build_rasterizer(name: str, settings: Settings) -> Rasterizer:
    key = (name or "").strip().lower()
    if key == "inkscape":
        return InkscapeRasterizer(settings.inkscape_command, timeout_sec=settings.command_timeout_sec)
    if key == "cairosvg":
        return CairoSvgRasterizer()
    raise UsageError(f"Unknown rasterizer: {name!r} (expected 'inkscape' or 'cairosvg')")
