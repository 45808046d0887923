"""Drag-to-reposition state machine.

States: IDLE -> DRAGGING -> IDLE. The state is an immutable value; every
transition is a pure function returning the next state. Callers apply the
positions computed by drag_position() to the field collection themselves.
"""

from dataclasses import dataclass, replace
from enum import Enum

from certgen.api.models import TextField
from certgen.config import MIN_DRAG_HEIGHT, MIN_DRAG_WIDTH
from certgen.design.transform import DisplayRect, to_template_space
from certgen.types import Point


class DragMode(str, Enum):
    """Placement controller mode."""

    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PlacementState:
    """Selection and drag state for one field collection."""

    mode: DragMode = DragMode.IDLE
    selected_id: str | None = None
    drag_offset: Point = (0.0, 0.0)  # pointer minus field origin, template pixels
    edit_mode: bool = True

    @property
    def is_dragging(self) -> bool:
        return self.mode is DragMode.DRAGGING


def clamp_position(x: float, y: float, template_width: int, template_height: int) -> Point:
    """
    Clamp a field origin so a minimum box stays on the template.

    x is kept within [0, template_width - MIN_DRAG_WIDTH] and y within
    [0, template_height - MIN_DRAG_HEIGHT]; templates smaller than the minimum pin to 0.
    """
    clamped_x = max(0.0, min(template_width - MIN_DRAG_WIDTH, x))
    clamped_y = max(0.0, min(template_height - MIN_DRAG_HEIGHT, y))
    return (clamped_x, clamped_y)


def set_edit_mode(state: PlacementState, enabled: bool) -> PlacementState:
    """Enter or leave edit mode. Leaving it ends any drag."""
    if enabled:
        return replace(state, edit_mode=True)
    return replace(state, edit_mode=False, mode=DragMode.IDLE, drag_offset=(0.0, 0.0))


def select(state: PlacementState, field_id: str | None) -> PlacementState:
    """
    Change the selected field without touching geometry.

    Ignored while a drag is in progress; only one field is ever selected.
    """
    if state.is_dragging:
        return state
    return replace(state, selected_id=field_id)


def pointer_down(
    state: PlacementState,
    field: TextField,
    pointer: Point,
    display_rect: DisplayRect,
    native_size: tuple[int, int],
) -> PlacementState:
    """
    Start dragging a field from its hit-box.

    Hit-boxes are only live in edit mode; outside it the state is returned unchanged.

    Args:
        state: Current state.
        field: Field whose hit-box received the press.
        pointer: Pointer position in display pixels.
        display_rect: Current on-screen box of the template.
        native_size: Template (width, height) in pixels.

    Returns:
        DRAGGING state with field selected and drag offset recorded.
    """
    if not state.edit_mode:
        return state

    pointer_x, pointer_y = to_template_space(pointer[0], pointer[1], display_rect, *native_size)
    return replace(
        state,
        mode=DragMode.DRAGGING,
        selected_id=field.id,
        drag_offset=(pointer_x - field.x, pointer_y - field.y),
    )


def drag_position(
    state: PlacementState,
    pointer: Point,
    display_rect: DisplayRect,
    native_size: tuple[int, int],
) -> Point | None:
    """
    New origin of the dragged field for a pointer move.

    Returns:
        Clamped (x, y) in template pixels, or None when not dragging.
    """
    if not state.is_dragging or state.selected_id is None:
        return None

    native_width, native_height = native_size
    pointer_x, pointer_y = to_template_space(pointer[0], pointer[1], display_rect, native_width, native_height)
    offset_x, offset_y = state.drag_offset
    return clamp_position(pointer_x - offset_x, pointer_y - offset_y, native_width, native_height)


def pointer_up(state: PlacementState) -> PlacementState:
    """End any drag unconditionally (pointer released or left the surface)."""
    return replace(state, mode=DragMode.IDLE, drag_offset=(0.0, 0.0))


def forget_field(state: PlacementState, field_id: str) -> PlacementState:
    """Drop a deleted field from the selection, ending its drag."""
    if state.selected_id != field_id:
        return state
    return replace(state, mode=DragMode.IDLE, selected_id=None, drag_offset=(0.0, 0.0))
