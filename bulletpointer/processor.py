from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import (
    DEFAULT_EXPORT_HEIGHT,
    DEFAULT_EXPORT_WIDTH,
    ImageDescriptor,
    LayerDescriptor,
    load_images,
)
from .document import SvgDocument, set_hidden
from .errors import SourceFileError
from .rasterizer import Rasterizer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerOutput:
    svg_path: Path
    png_path: Path


def _check_source(in_file: Path) -> None:
    if not in_file.exists():
        raise SourceFileError(f"Source file needs to exist: {in_file}")
    if not in_file.is_file():
        raise SourceFileError(f"Input file {in_file} is not regular file")
    if in_file.suffix.lower() != ".svg":
        raise SourceFileError(f"Expected .svg file but got {in_file}")


def process_layer(
    doc: SvgDocument,
    layer: LayerDescriptor,
    out_file: Path,
    rasterizer: Rasterizer,
    width: int = DEFAULT_EXPORT_WIDTH,
    height: int = DEFAULT_EXPORT_HEIGHT,
) -> LayerOutput:
    """Apply one layer's toggles to ``doc``, write it and rasterize it.

    Hides go first and shows second, so an id listed in both ends up shown.
    The document keeps the mutations for the next layer.
    """
    for element_id in layer.hide_ids:
        set_hidden(doc.find_unique(element_id), True)
    for element_id in layer.show_ids:
        set_hidden(doc.find_unique(element_id), False)

    doc.write(out_file)

    # the source was already checked to end with .svg (any case)
    out_png = out_file.with_name(out_file.name[:-4] + ".png")
    rasterizer.rasterize(out_file, out_png, width, height)
    log.debug("Layer %r -> %s, %s", layer.suffix, out_file.name, out_png.name)
    return LayerOutput(svg_path=out_file, png_path=out_png)


def process_image(
    image: ImageDescriptor,
    in_dir: Path,
    out_dir: Path,
    rasterizer: Rasterizer,
    width: int = DEFAULT_EXPORT_WIDTH,
    height: int = DEFAULT_EXPORT_HEIGHT,
) -> list[LayerOutput]:
    in_file = Path(in_dir) / image.filename
    _check_source(in_file)

    stem, ext = in_file.stem, in_file.suffix
    doc = SvgDocument.load(in_file)

    outputs = []
    for layer in image.layers:
        out_file = Path(out_dir) / f"{stem}{layer.suffix}{ext}"
        outputs.append(process_layer(doc, layer, out_file, rasterizer, width, height))
    return outputs


def run(
    config_path: Path,
    out_dir: Path,
    rasterizer: Rasterizer,
    width: int = DEFAULT_EXPORT_WIDTH,
    height: int = DEFAULT_EXPORT_HEIGHT,
) -> list[LayerOutput]:
    """Process every image in the config, stopping at the first error.

    Source filenames are resolved against the config file's directory.
    """
    out_dir = Path(out_dir)
    if not out_dir.exists():
        raise SourceFileError(f"Destination dir needs to exist: {out_dir}")
    if not out_dir.is_dir():
        raise SourceFileError(f"Destination should be a directory: {out_dir}")

    config_path = Path(config_path)
    images = load_images(config_path)
    in_dir = config_path.parent

    outputs: list[LayerOutput] = []
    for image in images:
        outputs.extend(process_image(image, in_dir, out_dir, rasterizer, width, height))
    log.debug("Processed %d image(s), %d layer(s)", len(images), len(outputs))
    return outputs
