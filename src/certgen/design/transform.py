"""Mapping between display coordinates and template pixel coordinates."""

from dataclasses import dataclass

from certgen.types import Point


@dataclass(frozen=True)
class DisplayRect:
    """On-screen bounding box of the rendered template (display pixels)."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Display rect must have a positive size, got {self.width}x{self.height}")

    def contains(self, x: float, y: float) -> bool:
        """Whether a display point falls inside this rect."""
        return self.left <= x <= self.left + self.width and self.top <= y <= self.top + self.height


def to_template_space(
    pointer_x: float,
    pointer_y: float,
    display_rect: DisplayRect,
    native_width: int,
    native_height: int,
) -> Point:
    """
    Convert a pointer position to template pixel coordinates.

    Scale factors are derived from the rect passed in on every call; the display box
    may have been resized since the last interaction.

    Args:
        pointer_x: Pointer x in display pixels.
        pointer_y: Pointer y in display pixels.
        display_rect: Current on-screen box of the template.
        native_width: Template width in pixels.
        native_height: Template height in pixels.

    Returns:
        (x, y) in template pixels.
    """
    scale_x = native_width / display_rect.width
    scale_y = native_height / display_rect.height
    return (
        (pointer_x - display_rect.left) * scale_x,
        (pointer_y - display_rect.top) * scale_y,
    )


def to_display_space(
    template_x: float,
    template_y: float,
    display_rect: DisplayRect,
    native_width: int,
    native_height: int,
) -> Point:
    """
    Convert template pixel coordinates to display coordinates.

    Inverse of to_template_space(); used to place overlay hit-boxes over a scaled preview.

    Returns:
        (x, y) in display pixels.
    """
    scale_x = display_rect.width / native_width
    scale_y = display_rect.height / native_height
    return (
        display_rect.left + template_x * scale_x,
        display_rect.top + template_y * scale_y,
    )


def scale_to_display(
    width: float,
    height: float,
    display_rect: DisplayRect,
    native_width: int,
    native_height: int,
) -> tuple[float, float]:
    """Scale a template-space size (no offset) to display pixels."""
    return (
        width * display_rect.width / native_width,
        height * display_rect.height / native_height,
    )
