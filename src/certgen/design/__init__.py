"""Field geometry, coordinate transforms, and interactive placement."""

from certgen.design.geometry import anchor_x, anchor_y, apply_patch, effective_width
from certgen.design.placement import DragMode, PlacementState
from certgen.design.transform import DisplayRect, to_display_space, to_template_space

__all__ = [
    "DisplayRect",
    "DragMode",
    "PlacementState",
    "anchor_x",
    "anchor_y",
    "apply_patch",
    "effective_width",
    "to_display_space",
    "to_template_space",
]
