"""Text utilities for sizing fields."""

import logging
import math

from certgen.config import AUTO_WIDTH_PADDING
from certgen.errors import FontUnavailableError, MeasurementError
from certgen.fonts import FontRegistry

logger = logging.getLogger(__name__)

# Design-time stand-ins keyed by a substring of the field label (first hit wins)
PLACEHOLDER_TEXTS: tuple[tuple[str, str], ...] = (
    ("name", "John Smith"),
    ("course", "Web Development"),
    ("date", "2024-01-15"),
    ("grade", "A+"),
    ("instructor", "Dr. Johnson"),
    ("institution", "Tech Academy"),
    ("score", "95%"),
    ("duration", "6 months"),
    ("certificate", "Certificate of Completion"),
)
DEFAULT_PLACEHOLDER = "Sample Text"


def placeholder_text(label: str) -> str:
    """
    Pick representative sample text for a field label.

    Used to size auto-width fields before any data is bound.

    Examples:
        "Student Name" → "John Smith"
        "Completion Date" → "2024-01-15"
        "Signature" → "Sample Text"
    """
    lower_label = label.lower()
    for keyword, sample in PLACEHOLDER_TEXTS:
        if keyword in lower_label:
            return sample
    return DEFAULT_PLACEHOLDER


def measure_text_width(text: str, font_size: float, font_family: str, registry: FontRegistry) -> int:
    """
    Measure the width a string occupies when drawn, plus fixed padding.

    Formula: ceil(advance width of text) + AUTO_WIDTH_PADDING

    The font comes from the same registry the renderer draws with, so the result
    is never narrower than the drawn text. Empty text yields the padding alone.

    Args:
        text: Text to measure.
        font_size: Font size in template pixels.
        font_family: Font family name.
        registry: Session font registry.

    Returns:
        Width in template pixels.

    Raises:
        MeasurementError: If no font resolves for font_family.
    """
    if not text:
        return AUTO_WIDTH_PADDING

    try:
        font = registry.load_font(font_family, font_size)
    except FontUnavailableError as e:
        raise MeasurementError(f"Cannot measure text in '{font_family}': {e}") from e

    return math.ceil(font.getlength(text)) + AUTO_WIDTH_PADDING
