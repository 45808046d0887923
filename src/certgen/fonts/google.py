"""Open substitutes for the designer's font families, fetched from Google Fonts."""

import logging
import re
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

# Default cache for downloaded font files
CACHE_DIR = Path.home() / ".cache" / "certgen" / "fonts"

# CSS API v1 serves TTF sources, which Pillow can load directly
GOOGLE_FONTS_CSS_URL = "https://fonts.googleapis.com/css"

CSS_TIMEOUT = 10
FONT_TIMEOUT = 30

_SRC_URL = re.compile(r"src:\s*url\((https://[^)]+\.ttf)\)")
_ANY_TTF_URL = re.compile(r"(https://[^\s'\"()]+\.ttf)")


def cached_font_path(family: str, weight: int, cache_dir: Path) -> Path:
    """Cache location of a downloaded family/weight, e.g. PTSans-400.ttf."""
    return cache_dir / f"{family.replace(' ', '')}-{weight}.ttf"


def get_google_font(family: str, weight: int = 400, cache_dir: Path | None = None) -> Optional[Path]:
    """
    Return a local TTF for a Google Fonts family, downloading it on first use.

    Network and filesystem failures are logged and reported as None, so callers
    can continue down their own fallback chain.

    Args:
        family: Google Fonts family name (e.g., "Arimo", "PT Sans").
        weight: Font weight (400 regular, 700 bold).
        cache_dir: Where downloaded files are kept. Defaults to CACHE_DIR.

    Returns:
        Path to the cached TTF file, or None if it could not be obtained.
    """
    cache_path = cached_font_path(family, weight, cache_dir or CACHE_DIR)

    if cache_path.is_file():
        logger.debug(f"Using cached Google Font: {cache_path.name}")
        return cache_path

    try:
        logger.info(f"Downloading Google Font: {family} (weight {weight})")
        font_bytes = _download_ttf(family, weight)
        if font_bytes is None:
            return None

        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_bytes(font_bytes)
    except requests.RequestException as e:
        logger.error(f"Failed to download Google Font {family} (weight {weight}): {e}")
        return None
    except OSError as e:
        logger.error(f"Failed to cache Google Font {family} in {cache_path.parent}: {e}")
        return None

    logger.info(f"Downloaded and cached Google Font: {cache_path.name}")
    return cache_path


def _download_ttf(family: str, weight: int) -> Optional[bytes]:
    """Fetch the family's stylesheet, then the TTF it points at."""
    css_response = requests.get(
        GOOGLE_FONTS_CSS_URL,
        params={"family": f"{family}:{weight}", "display": "swap"},
        timeout=CSS_TIMEOUT,
    )
    css_response.raise_for_status()

    font_url = extract_ttf_url(css_response.text)
    if font_url is None:
        logger.error(f"No TTF source in Google Fonts stylesheet for {family}")
        return None

    font_response = requests.get(font_url, timeout=FONT_TIMEOUT)
    font_response.raise_for_status()
    if not font_response.content:
        logger.error(f"Google Fonts returned an empty file for {family}")
        return None
    return font_response.content


def extract_ttf_url(css_content: str) -> Optional[str]:
    """
    Find the TTF URL in a Google Fonts stylesheet.

    Prefers the @font-face src declaration, then any TTF URL in the text.
    """
    for pattern in (_SRC_URL, _ANY_TTF_URL):
        match = pattern.search(css_content)
        if match:
            return match.group(1)
    return None
