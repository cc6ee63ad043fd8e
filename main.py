import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from bulletpointer.config import Settings, load_settings
from bulletpointer.errors import BulletpointerError
from bulletpointer.processor import run
from bulletpointer.rasterizer import build_rasterizer

app = typer.Typer(
    name="bulletpointer",
    help="Apply show/hide layers to SVG files and export each layer as a PNG slide.",
    add_completion=False,
)


def _configure_logging(settings: Settings) -> None:
    # Console always; optional rotating file
    log_format = "%(asctime)s %(levelname)s %(name)s %(message)s"
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=log_format)
    if settings.log_file:
        try:
            settings.log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backups,
                encoding="utf-8",
            )
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(log_format))
            logging.getLogger().addHandler(fh)
        except Exception:
            logging.exception("Failed to set up file logging")


@app.command()
def main(
    config: Path = typer.Argument(..., help="YAML file listing images and their layers."),
    out_dir: Path = typer.Argument(..., help="Existing directory for the SVG and PNG output."),
    rasterizer: Optional[str] = typer.Option(
        None, "--rasterizer", "-r", help="inkscape or cairosvg (default: $RASTERIZER)."
    ),
) -> None:
    # Load .env if present
    load_dotenv()

    try:
        settings = load_settings()
        _configure_logging(settings)
        backend = build_rasterizer(rasterizer or settings.rasterizer, settings)
        run(
            config,
            out_dir,
            backend,
            width=settings.export_width,
            height=settings.export_height,
        )
    except BulletpointerError as e:
        logging.error("%s", e)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
