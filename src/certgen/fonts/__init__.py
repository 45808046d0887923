"""Font registration and resolution.

Measuring and drawing both go through FontRegistry.load_font(), so an auto-sized
field is always measured with exactly the font it is later drawn with.
"""

import logging
import sys
from pathlib import Path

from PIL import ImageFont

from certgen.config import Settings
from certgen.errors import FontUnavailableError
from certgen.fonts.google import get_google_font

logger = logging.getLogger(__name__)

FONTS_DIR = Path(__file__).parent

FONT_SUFFIXES = (".ttf", ".otf", ".ttc")

# Candidate font files per family, most faithful first.
# Liberation / Arimo / Tinos / Cousine are metric-compatible with the proprietary faces.
FAMILY_CANDIDATES: dict[str, tuple[str, ...]] = {
    "Arial": (
        "arial.ttf",
        "Arial.ttf",
        "LiberationSans-Regular.ttf",
        "Arimo-Regular.ttf",
        "Arimo-400.ttf",
    ),
    "Times New Roman": (
        "times.ttf",
        "Times New Roman.ttf",
        "TimesNewRoman.ttf",
        "LiberationSerif-Regular.ttf",
        "Tinos-Regular.ttf",
        "Tinos-400.ttf",
    ),
    "Helvetica": (
        "Helvetica.ttf",
        "Helvetica.ttc",
        "NimbusSans-Regular.otf",
        "LiberationSans-Regular.ttf",
        "Arimo-Regular.ttf",
        "Arimo-400.ttf",
    ),
    "Georgia": (
        "georgia.ttf",
        "Georgia.ttf",
        "Gelasio-Regular.ttf",
        "Gelasio-400.ttf",
    ),
    "Verdana": (
        "verdana.ttf",
        "Verdana.ttf",
        "DejaVuSans.ttf",
        "PTSans-400.ttf",
    ),
    "Courier New": (
        "cour.ttf",
        "Courier New.ttf",
        "CourierNew.ttf",
        "LiberationMono-Regular.ttf",
        "Cousine-Regular.ttf",
        "Cousine-400.ttf",
    ),
}

# Open families on Google Fonts standing in for each supported family
GOOGLE_SUBSTITUTES: dict[str, str] = {
    "Arial": "Arimo",
    "Times New Roman": "Tinos",
    "Helvetica": "Arimo",
    "Georgia": "Gelasio",
    "Verdana": "PT Sans",
    "Courier New": "Cousine",
}


def _system_font_dirs() -> list[Path]:
    """Return the usual system font directories for this platform."""
    home = Path.home()
    if sys.platform == "win32":
        return [Path("C:/Windows/Fonts"), home / "AppData/Local/Microsoft/Windows/Fonts"]
    if sys.platform == "darwin":
        return [Path("/System/Library/Fonts"), Path("/Library/Fonts"), home / "Library/Fonts"]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        home / ".fonts",
        home / ".local/share/fonts",
    ]


class FontRegistry:
    """
    Resolves font families to Pillow fonts for one session.

    Each registry keeps its own file index and font cache so independent sessions
    never share state.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize registry.

        Args:
            settings: Font lookup settings. If None, uses Settings() defaults.
        """
        self.settings = settings or Settings()
        # Lower-cased file name -> path; first registration wins
        self._font_paths: dict[str, Path] = {}
        self._fonts: dict[tuple[str, float], ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}
        # Substitutes whose download already failed in this session
        self._failed_downloads: set[str] = set()
        self._indexed = False

    def register_fonts(self, directory: Path) -> int:
        """
        Register every font file found under a directory.

        Args:
            directory: Directory scanned recursively for .ttf/.otf/.ttc files.

        Returns:
            Number of newly registered files.
        """
        if not directory.is_dir():
            logger.debug(f"Font directory {directory} does not exist, skipping")
            return 0

        registered_count = 0
        for font_path in sorted(directory.rglob("*")):
            if font_path.suffix.lower() not in FONT_SUFFIXES:
                continue
            key = font_path.name.lower()
            if key not in self._font_paths:
                self._font_paths[key] = font_path
                registered_count += 1

        if registered_count:
            logger.info(f"Registered {registered_count} font file(s) from {directory}")
        return registered_count

    def _ensure_indexed(self) -> None:
        if self._indexed:
            return
        self._indexed = True
        for directory in self.settings.font_dirs:
            self.register_fonts(Path(directory))
        self.register_fonts(FONTS_DIR)
        if self.settings.search_system_fonts:
            for directory in _system_font_dirs():
                self.register_fonts(directory)

    def get_font_path(self, family: str) -> Path | None:
        """
        Get the font file used for a family, downloading it if allowed.

        Args:
            family: Supported font family name (e.g., "Arial").

        Returns:
            Path to the font file, or None if no file resolves.
        """
        self._ensure_indexed()

        for candidate in FAMILY_CANDIDATES.get(family, (f"{family}.ttf",)):
            font_path = self._font_paths.get(candidate.lower())
            if font_path is not None:
                logger.debug(f"Font '{family}' resolved to {font_path}")
                return font_path

        substitute = GOOGLE_SUBSTITUTES.get(family)
        if (
            self.settings.download_google_fonts
            and substitute is not None
            and substitute not in self._failed_downloads
        ):
            logger.info(f"Font '{family}' not installed, trying Google Font '{substitute}'...")
            font_path = get_google_font(substitute, cache_dir=self.settings.font_cache_dir)
            if font_path:
                self._font_paths[font_path.name.lower()] = font_path
                return font_path
            self._failed_downloads.add(substitute)
            logger.warning(f"Could not download '{substitute}' from Google Fonts")

        return None

    def load_font(
        self, family: str, size: float
    ) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        """
        Load a font for drawing or measuring.

        Args:
            family: Supported font family name.
            size: Font size in template pixels.

        Returns:
            Pillow font object (cached per family and size).

        Raises:
            FontUnavailableError: If no font file resolves and the default font is disabled.
        """
        key = (family, size)
        if key in self._fonts:
            return self._fonts[key]

        font = None
        font_path = self.get_font_path(family)
        if font_path is not None:
            try:
                font = ImageFont.truetype(str(font_path), size)
            except OSError as e:
                logger.warning(f"Failed to load font {font_path.name} for '{family}': {e}")

        if font is None:
            if not self.settings.use_default_font:
                raise FontUnavailableError(f"No font file found for family '{family}'")
            logger.warning(f"Using Pillow's default font for '{family}'")
            font = ImageFont.load_default(size=size)

        self._fonts[key] = font
        return font
