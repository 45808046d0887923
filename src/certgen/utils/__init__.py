"""Utility modules."""

from certgen.utils.text import measure_text_width, placeholder_text

__all__ = [
    "measure_text_width",
    "placeholder_text",
]
