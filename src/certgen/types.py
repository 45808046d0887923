"""Type aliases used across the certgen package."""

from typing import Literal, Tuple

# Color types
RGBColor = Tuple[int, int, int]  # RGB color in 0-255 range

# (x, y) in template or display pixels
Point = Tuple[float, float]

# Horizontal anchor of a field's text
TextAlign = Literal["left", "center", "right"]

# Font families offered by the field designer
FontFamily = Literal[
    "Arial",
    "Times New Roman",
    "Helvetica",
    "Georgia",
    "Verdana",
    "Courier New",
]
