"""Certificate rendering: template image plus every field's text for one data row."""

import logging
from typing import Iterable

from PIL import Image, ImageDraw

from certgen.api.models import DataRow, Template, TextField
from certgen.design.geometry import anchor_x, anchor_y, bound_text, effective_width, text_anchor
from certgen.errors import FontUnavailableError
from certgen.fonts import FontRegistry

logger = logging.getLogger(__name__)


def render_certificate(
    template: Template,
    fields: Iterable[TextField],
    row: DataRow | None,
    registry: FontRegistry,
    strict: bool = False,
) -> Image.Image:
    """
    Render one certificate at the template's native size.

    The same function serves live preview and export, so both produce identical pixels.
    Fields are drawn in collection order; later fields draw on top and nothing is clipped.

    Args:
        template: Template image and native size.
        fields: Fields to draw, in order.
        row: Data row the fields are bound to (None draws empty strings).
        registry: Session font registry (shared with width measurement).
        strict: Raise instead of skipping a field whose font cannot be loaded.

    Returns:
        New RGBA image of exactly template.width x template.height.

    Raises:
        InvalidTemplateError: If the template image fails to decode.
        FontUnavailableError: If strict and a field's font cannot be loaded.
    """
    surface = Image.new("RGBA", (template.width, template.height))
    surface.paste(template.image(), (0, 0))

    draw = ImageDraw.Draw(surface)
    for field in fields:
        text = bound_text(field, row)
        if not text:
            continue

        try:
            font = registry.load_font(field.font_family, field.font_size)
        except FontUnavailableError as e:
            if strict:
                raise
            logger.warning(f"Skipping field '{field.label}' in preview: {e}")
            continue

        width = effective_width(field, text, registry)
        position = (anchor_x(field, width), anchor_y(field))
        draw.text(position, text, fill=(*field.color, 255), font=font, anchor=text_anchor(field))

    return surface
