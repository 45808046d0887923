"""Editing session: template, fields, data rows, and the operations on them."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from PIL import Image

from certgen.api.models import DataRow, Template, TextField
from certgen.config import Settings
from certgen.design import placement
from certgen.design.geometry import apply_patch, binding_text, effective_width
from certgen.design.placement import PlacementState
from certgen.design.transform import DisplayRect, scale_to_display, to_display_space
from certgen.fonts import FontRegistry
from certgen.render.archive import BatchExporter, CancelCheck, ExportResult, ProgressCallback, row_title
from certgen.render.certificate import render_certificate
from certgen.render.image import save_image_to_bytes
from certgen.types import Point
from certgen.utils.tabular import auto_map_fields

logger = logging.getLogger(__name__)

# Defaults for a field created with "add field"
NEW_FIELD_DEFAULTS: dict[str, Any] = {
    "x": 100,
    "y": 100,
    "width": 2500,
    "height": 300,
    "font_size": 200,
    "font_family": "Arial",
    "color": (0, 0, 0),
    "align": "center",
    "auto_width": False,
}


@dataclass(frozen=True)
class HitBox:
    """Overlay box of a field in display pixels."""

    field_id: str
    left: float
    top: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.left + self.width and self.top <= y <= self.top + self.height


class Session:
    """
    One editing session.

    Holds everything that used to be ambient UI state (template, field list, data
    rows, preview row, drag state) so independent sessions never share anything.
    Mutations happen between renders only; rendering always re-reads current state.
    """

    def __init__(
        self,
        template: Template,
        rows: Sequence[DataRow] | None = None,
        settings: Settings | None = None,
        fields: Sequence[TextField] | None = None,
    ) -> None:
        """
        Initialize session.

        Args:
            template: Template image.
            rows: Imported data rows (may be set later with set_rows()).
            settings: Session settings. If None, uses Settings() defaults.
            fields: Initial fields.
        """
        self.template = template
        self.settings = settings or Settings()
        self.registry = FontRegistry(self.settings)
        self.exporter = BatchExporter(self.registry, self.settings)
        self.rows: list[DataRow] = list(rows or [])
        self.preview_index = 0
        self.state = PlacementState()
        self._fields: list[TextField] = list(fields or [])
        self._snapshot: list[TextField] = list(self._fields)

    # ========================================================================
    # Fields
    # ========================================================================

    @property
    def fields(self) -> list[TextField]:
        """Fields in insertion order (copy of the list)."""
        return list(self._fields)

    @property
    def native_size(self) -> tuple[int, int]:
        return (self.template.width, self.template.height)

    def get_field(self, field_id: str) -> TextField:
        """
        Look up a field.

        Raises:
            KeyError: If no field has that id.
        """
        for field in self._fields:
            if field.id == field_id:
                return field
        raise KeyError(f"No field with id '{field_id}'")

    def _index_of(self, field_id: str) -> int:
        for index, field in enumerate(self._fields):
            if field.id == field_id:
                return index
        raise KeyError(f"No field with id '{field_id}'")

    def add_field(self, **overrides: Any) -> TextField:
        """
        Add a field with designer defaults and select it.

        Args:
            **overrides: Attribute values replacing the defaults.

        Returns:
            The new field.
        """
        values = {"label": f"Field {len(self._fields) + 1}", **NEW_FIELD_DEFAULTS, **overrides}
        field = TextField(**values)
        self._fields.append(field)
        self.state = placement.select(self.state, field.id)
        logger.debug(f"Added field {field.id} '{field.label}'")
        return field

    def update_field(self, field_id: str, patch: Mapping[str, Any]) -> TextField:
        """
        Apply a partial update to a field.

        Auto-width fields are re-measured against the current preview row (or a
        placeholder before data is bound) when the patch affects their width.

        Raises:
            KeyError: If no field has that id.
            ValueError: If the patch is invalid.
        """
        index = self._index_of(field_id)
        updated = apply_patch(self._fields[index], patch, self.registry, self.preview_row)
        self._fields[index] = updated
        return updated

    def remove_field(self, field_id: str) -> None:
        """
        Delete a field.

        Raises:
            KeyError: If no field has that id.
        """
        index = self._index_of(field_id)
        del self._fields[index]
        self.state = placement.forget_field(self.state, field_id)
        logger.debug(f"Removed field {field_id}")

    def auto_map_fields(self, columns: Sequence[str]) -> list[TextField]:
        """Replace all fields with one field per column."""
        self._fields = auto_map_fields(columns)
        self.state = PlacementState(edit_mode=self.state.edit_mode)
        return self.fields

    def mark_fields(self) -> None:
        """Remember the current fields as the state reset_fields() returns to."""
        self._snapshot = list(self._fields)

    def reset_fields(self) -> None:
        """Discard edits made since the last mark_fields() and clear the selection."""
        self._fields = list(self._snapshot)
        self.state = PlacementState(edit_mode=self.state.edit_mode)

    # ========================================================================
    # Data rows
    # ========================================================================

    def set_rows(self, rows: Sequence[DataRow]) -> None:
        """Replace the imported rows and return the preview to the first one."""
        self.rows = list(rows)
        self.preview_index = 0

    def set_preview_index(self, index: int) -> int:
        """Choose the preview row, clamped to the available rows."""
        if not self.rows:
            self.preview_index = 0
        else:
            self.preview_index = max(0, min(len(self.rows) - 1, index))
        return self.preview_index

    @property
    def preview_row(self) -> DataRow | None:
        """Row currently previewed, or None before data is imported."""
        if not self.rows:
            return None
        return self.rows[self.preview_index]

    def title_for_row(self, index: int) -> str:
        """Value of the first field for a row (used to label rows and name files)."""
        return row_title(self._fields, self.rows[index])

    # ========================================================================
    # Rendering and export
    # ========================================================================

    def render_preview(self) -> Image.Image:
        """
        Render the preview row (or empty fields before data is bound).

        Unloadable fonts skip their field instead of failing the preview.

        Raises:
            InvalidTemplateError: If the template image fails to decode.
        """
        return render_certificate(self.template, self._fields, self.preview_row, self.registry)

    def preview_png(self) -> bytes:
        """Preview encoded in the export format."""
        return save_image_to_bytes(self.render_preview(), format=self.settings.output_format)

    def export_all(
        self,
        progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> ExportResult:
        """
        Render every row into one archive.

        Raises:
            ExportAbortedError: If any row fails.
            ExportCancelledError: If should_cancel() returned True between rows.
        """
        return self.exporter.export_all(self.template, self._fields, self.rows, progress, should_cancel)

    # ========================================================================
    # Interactive placement
    # ========================================================================

    def set_edit_mode(self, enabled: bool) -> None:
        self.state = placement.set_edit_mode(self.state, enabled)

    def select_field(self, field_id: str | None) -> None:
        """Change selection (ignored mid-drag); geometry is untouched."""
        if field_id is not None:
            self.get_field(field_id)
        self.state = placement.select(self.state, field_id)

    @property
    def selected_field(self) -> TextField | None:
        if self.state.selected_id is None:
            return None
        return self.get_field(self.state.selected_id)

    def field_width(self, field: TextField) -> float:
        """Effective width of a field for the current binding."""
        return effective_width(field, binding_text(field.label, self.preview_row), self.registry)

    def hit_boxes(self, display_rect: DisplayRect) -> list[HitBox]:
        """Overlay boxes of all fields over the displayed template, in field order."""
        boxes = []
        for field in self._fields:
            left, top = to_display_space(field.x, field.y, display_rect, *self.native_size)
            width, height = scale_to_display(
                self.field_width(field), field.height, display_rect, *self.native_size
            )
            boxes.append(HitBox(field.id, left, top, width, height))
        return boxes

    def pointer_down(self, field_id: str, pointer: Point, display_rect: DisplayRect) -> None:
        """Press on a field's hit-box; starts a drag in edit mode."""
        field = self.get_field(field_id)
        self.state = placement.pointer_down(self.state, field, pointer, display_rect, self.native_size)

    def pointer_move(self, pointer: Point, display_rect: DisplayRect) -> TextField | None:
        """
        Move the dragged field with the pointer.

        Returns:
            The moved field, or None when no drag is active.
        """
        position = placement.drag_position(self.state, pointer, display_rect, self.native_size)
        if position is None:
            return None
        x, y = position
        return self.update_field(self.state.selected_id, {"x": x, "y": y})

    def pointer_up(self) -> None:
        self.state = placement.pointer_up(self.state)

    def pointer_leave(self) -> None:
        self.state = placement.pointer_up(self.state)
