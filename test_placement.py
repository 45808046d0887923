"""Drag state machine: offsets, clamping, and transitions."""

from certgen.api.models import TextField
from certgen.config import MIN_DRAG_HEIGHT, MIN_DRAG_WIDTH
from certgen.design import placement
from certgen.design.placement import DragMode, PlacementState, clamp_position
from certgen.design.transform import DisplayRect

NATIVE = (1000, 600)
# Template shown at half size
RECT = DisplayRect(left=0, top=0, width=500, height=300)


def make_field(**overrides) -> TextField:
    values = dict(label="Name", x=100, y=100, width=300, height=40, font_size=24)
    values.update(overrides)
    return TextField(**values)


def test_pointer_down_records_offset_in_template_space():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    assert state.mode is DragMode.DRAGGING
    assert state.selected_id == field.id
    assert state.drag_offset == (20, 10)


def test_pointer_down_outside_edit_mode_is_ignored():
    state = PlacementState(edit_mode=False)
    assert placement.pointer_down(state, make_field(), (60, 55), RECT, NATIVE) is state


def test_drag_keeps_grab_point_under_pointer():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    # Pointer moves 50 display px right = 100 template px
    assert placement.drag_position(state, (110, 55), RECT, NATIVE) == (200, 100)


def test_drag_clamps_to_template():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    assert placement.drag_position(state, (-400, -400), RECT, NATIVE) == (0, 0)
    assert placement.drag_position(state, (5000, 5000), RECT, NATIVE) == (
        NATIVE[0] - MIN_DRAG_WIDTH,
        NATIVE[1] - MIN_DRAG_HEIGHT,
    )


def test_clamp_on_tiny_template_pins_to_origin():
    assert clamp_position(30, 15, 40, 10) == (0, 0)


def test_no_position_when_idle():
    assert placement.drag_position(PlacementState(), (10, 10), RECT, NATIVE) is None


def test_pointer_up_always_returns_to_idle():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    idle = placement.pointer_up(state)
    assert idle.mode is DragMode.IDLE
    assert idle.selected_id == field.id
    assert placement.pointer_up(idle).mode is DragMode.IDLE


def test_select_while_idle_changes_selection_only():
    state = placement.select(PlacementState(), "field-a")
    assert state.selected_id == "field-a"
    assert state.mode is DragMode.IDLE


def test_select_ignored_while_dragging():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    assert placement.select(state, "field-other").selected_id == field.id


def test_leaving_edit_mode_ends_drag():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    state = placement.set_edit_mode(state, False)
    assert state.mode is DragMode.IDLE
    assert not state.edit_mode


def test_forget_field_clears_selection():
    field = make_field()
    state = placement.pointer_down(PlacementState(), field, (60, 55), RECT, NATIVE)
    assert placement.forget_field(state, "unrelated") is state
    cleared = placement.forget_field(state, field.id)
    assert cleared.selected_id is None
    assert cleared.mode is DragMode.IDLE
