from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_INKSCAPE_COMMAND = ("flatpak", "run", "org.inkscape.Inkscape")
DEFAULT_EXPORT_WIDTH = 1280
DEFAULT_EXPORT_HEIGHT = 720


class LayerDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    suffix: str
    hide_ids: tuple[str, ...] = ()
    show_ids: tuple[str, ...] = ()

    @field_validator("hide_ids", "show_ids", mode="before")
    @classmethod
    def _none_is_empty(cls, v: object) -> object:
        # `hide_ids:` with no value parses as null
        return () if v is None else v


class ImageDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    filename: str
    layers: tuple[LayerDescriptor, ...] = ()

    @field_validator("layers", mode="before")
    @classmethod
    def _none_is_empty(cls, v: object) -> object:
        return () if v is None else v


_IMAGES = TypeAdapter(list[ImageDescriptor])


def _one_line(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
    )


def parse_images(text: str) -> list[ImageDescriptor]:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Problem parsing YAML: {' '.join(str(e).split())}") from e
    if raw is None:
        return []
    try:
        return _IMAGES.validate_python(raw)
    except ValidationError as e:
        raise ConfigError(f"Problem parsing YAML: {_one_line(e)}") from e


def load_images(path: Path | str) -> list[ImageDescriptor]:
    """Read and validate the image/layer list; all or nothing."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Problem reading file: {e}") from e
    return parse_images(text)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Logging
    log_file: Path | None = None
    log_level: str = "INFO"
    log_max_bytes: int = 5 * 1024 * 1024
    log_backups: int = 5
    # Rasterization
    rasterizer: Literal["inkscape", "cairosvg"] = "inkscape"
    inkscape_command: tuple[str, ...] = Field(default=DEFAULT_INKSCAPE_COMMAND, min_length=1)
    export_width: int = Field(default=DEFAULT_EXPORT_WIDTH, gt=0)
    export_height: int = Field(default=DEFAULT_EXPORT_HEIGHT, gt=0)
    command_timeout_sec: float | None = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return (v or "INFO").upper()

    @field_validator("log_file", mode="before")
    @classmethod
    def _ensure_log_path(cls, v: str | Path | None) -> Path | None:
        if not v:
            return None
        return Path(v).expanduser().resolve()

    @field_validator("rasterizer", mode="before")
    @classmethod
    def _lower_rasterizer(cls, v: str) -> str:
        return (v or "inkscape").strip().lower()

    @field_validator("inkscape_command", mode="before")
    @classmethod
    def _split_command(cls, v: object) -> object:
        if v in (None, ""):
            return DEFAULT_INKSCAPE_COMMAND
        if isinstance(v, str):
            return tuple(shlex.split(v))
        return v


def load_settings() -> Settings:
    timeout_raw = os.getenv("COMMAND_TIMEOUT_SEC", "").strip()
    try:
        return Settings(
            log_file=os.getenv("LOG_FILE", "").strip() or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_max_bytes=int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            log_backups=int(os.getenv("LOG_BACKUPS", "5")),
            rasterizer=os.getenv("RASTERIZER", "inkscape"),
            inkscape_command=os.getenv("INKSCAPE_COMMAND", ""),
            export_width=int(os.getenv("EXPORT_WIDTH", "") or DEFAULT_EXPORT_WIDTH),
            export_height=int(os.getenv("EXPORT_HEIGHT", "") or DEFAULT_EXPORT_HEIGHT),
            command_timeout_sec=float(timeout_raw) if timeout_raw else None,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid setting: {_one_line(e)}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid setting: {e}") from e
