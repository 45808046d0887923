"""Configuration loading and validation."""

import re
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

# Padding added to every measured text width (template pixels)
AUTO_WIDTH_PADDING = 20

# Smallest box kept on canvas while dragging (template pixels)
MIN_DRAG_WIDTH = 50
MIN_DRAG_HEIGHT = 20

DEFAULT_CONFIG_NAME = "certgen.toml"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class Settings(BaseModel):
    """
    Session-wide settings.

    All parameters have sensible defaults. Override only what you need using
    Pydantic's model_copy():

        base = Settings(font_dirs=[Path("fonts")])
        offline = base.model_copy(update={"download_google_fonts": False})
    """

    # ========================================================================
    # Fonts
    # ========================================================================
    font_dirs: list[Path] = Field(default_factory=list)
    """Extra directories scanned for .ttf/.otf files before anything else."""

    search_system_fonts: bool = True
    """Also look in the usual system font directories."""

    download_google_fonts: bool = False
    """Download an open substitute from Google Fonts when a family is not installed."""

    font_cache_dir: Path = Path.home() / ".cache" / "certgen" / "fonts"
    """Where downloaded Google Fonts are cached."""

    use_default_font: bool = True
    """Fall back to Pillow's built-in scalable font when nothing else resolves."""

    # ========================================================================
    # Export
    # ========================================================================
    output_format: Literal["PNG"] = "PNG"
    """Image format of each rendered certificate."""

    archive_name: str = "certificates.zip"
    """Default file name of the exported archive."""

    filename_fallback_prefix: str = "certificate"
    """Entry name prefix used when a row has no title value (followed by the 1-based row number)."""


def load_config(config_path: Path | None = None) -> Settings:
    """
    Load settings from a TOML file.

    Args:
        config_path: Path to config file. If None, uses certgen.toml in the current
            directory when it exists and defaults otherwise.

    Returns:
        Validated Settings object.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        ValueError: If config is invalid.
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_NAME
        if not config_path.exists():
            return Settings()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        config_dict = tomllib.load(f)

    # Relative font directories are relative to the config file
    font_dirs = config_dict.get("font_dirs")
    if font_dirs:
        config_dict["font_dirs"] = [
            path if (path := Path(entry)).is_absolute() else config_path.parent / path
            for entry in font_dirs
        ]

    return Settings(**config_dict)


def sanitize_filename(name: str) -> str:
    """
    Sanitize string for use as an archive entry name.

    Every character outside letters, digits, underscore and hyphen becomes "_".

    Args:
        name: String to sanitize.

    Returns:
        Sanitized string safe for filenames.
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def format_output_name(title: str | None, index: int, prefix: str = "certificate") -> str:
    """
    Build the base file name (without extension) for one exported row.

    Args:
        title: Row value bound to the first field, if any.
        index: Zero-based row index.
        prefix: Prefix for rows without a title.

    Returns:
        Sanitized base name.
    """
    name = title or f"{prefix}-{index + 1}"
    return sanitize_filename(name)
