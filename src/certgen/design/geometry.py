"""Field geometry: effective width, text anchors, and field patching.

Preview and export both derive every drawing position from these functions, so the
two produce identical pixels for identical inputs.
"""

import logging
from typing import Any, Mapping

from certgen.api.models import DataRow, TextField
from certgen.errors import MeasurementError
from certgen.fonts import FontRegistry
from certgen.types import TextAlign
from certgen.utils.text import measure_text_width, placeholder_text

logger = logging.getLogger(__name__)

# Inputs of the width measurement; touching any of them re-measures an auto-width field
MEASURED_ATTRIBUTES = frozenset({"label", "font_size", "font_family"})

# Pillow anchors: horizontal part follows the alignment, "s" = alphabetic baseline
PIL_ANCHORS: dict[TextAlign, str] = {
    "left": "ls",
    "center": "ms",
    "right": "rs",
}


def effective_width(field: TextField, text: str | None, registry: FontRegistry) -> float:
    """
    Width used for layout: manual width, or measured text width for auto-width fields.

    Falls back to the manual width when the text is empty/absent or cannot be measured.

    Args:
        field: Field to size.
        text: Text bound to the field, if any.
        registry: Session font registry.

    Returns:
        Width in template pixels.
    """
    if not field.auto_width or not text:
        return field.width

    try:
        return measure_text_width(text, field.font_size, field.font_family, registry)
    except MeasurementError as e:
        logger.warning(f"Using manual width {field.width} for field '{field.label}': {e}")
        return field.width


def anchor_x(field: TextField, width: float) -> float:
    """
    X coordinate handed to the text primitive, whose horizontal anchor follows field.align.

    left → x, center → x + width/2, right → x + width.
    """
    if field.align == "center":
        return field.x + width / 2
    if field.align == "right":
        return field.x + width
    return field.x


def anchor_y(field: TextField) -> float:
    """
    Baseline Y coordinate of the field's text.

    Uses y + height/2 + font_size/3, an empirical vertical-centering ratio rather
    than true glyph-box centering. Keep it exact: previews and exports must match.
    """
    return field.y + field.height / 2 + field.font_size / 3


def text_anchor(field: TextField) -> str:
    """Pillow text anchor for the field's alignment."""
    return PIL_ANCHORS[field.align]


def bound_text(field: TextField, row: DataRow | None) -> str:
    """
    Text a field shows for a row.

    Missing columns resolve to an empty string so sparse rows still render.
    """
    if row is None:
        return ""
    return row.get(field.label) or ""


def binding_text(label: str, row: DataRow | None) -> str:
    """
    Text used to size an auto-width field while editing.

    The preview row's value for label, or a placeholder when no data is bound yet.
    """
    if row is None:
        return placeholder_text(label)
    return row.get(label) or ""


def needs_remeasure(field: TextField, patch: Mapping[str, Any]) -> bool:
    """
    Whether a patch requires re-measuring the patched field.

    Takes the already validated field, so coerced values such as "true" or 1 count
    the same as True. Re-measures when the field is auto-width and the patch either
    sets auto_width or touches one of the measurement inputs.
    """
    if not field.auto_width:
        return False
    return "auto_width" in patch or not MEASURED_ATTRIBUTES.isdisjoint(patch)


def apply_patch(
    field: TextField,
    patch: Mapping[str, Any],
    registry: FontRegistry,
    preview_row: DataRow | None = None,
) -> TextField:
    """
    Apply a partial update to a field and re-measure its width when required.

    The recomputed width is stored on the returned field, so readers of
    field.width see the measured value without re-deriving it.

    Args:
        field: Current field.
        patch: Attribute name -> new value. "id" cannot be patched.
        registry: Session font registry.
        preview_row: Live preview row, or None when no data is bound yet.

    Returns:
        Validated, updated copy of the field.

    Raises:
        ValueError: If the patch names unknown attributes, touches "id", or holds invalid values.
    """
    if "id" in patch:
        raise ValueError("Field id is immutable")

    unknown = set(patch) - set(TextField.model_fields)
    if unknown:
        raise ValueError(f"Unknown field attribute(s): {', '.join(sorted(unknown))}")

    updated = TextField.model_validate({**field.model_dump(), **patch})

    if needs_remeasure(updated, patch):
        text = binding_text(updated.label, preview_row)
        if text:
            try:
                width = measure_text_width(text, updated.font_size, updated.font_family, registry)
            except MeasurementError as e:
                logger.warning(f"Keeping width {updated.width} for field '{updated.label}': {e}")
            else:
                updated = updated.model_copy(update={"width": float(width)})

    return updated
