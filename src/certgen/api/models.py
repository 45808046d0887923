"""Data models for templates, text fields, and data rows."""

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from PIL import Image, ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator

from certgen.render.image import decode_image, get_image_dimensions
from certgen.types import FontFamily, RGBColor, TextAlign

# One record of imported data: column name -> cell value
DataRow = Mapping[str, str]


def new_field_id() -> str:
    """Return a fresh opaque field identifier."""
    return f"field-{uuid.uuid4().hex[:12]}"


class TextField(BaseModel):
    """A named, positioned text slot on a template, bound to a data column by label."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    id: str = Field(default_factory=new_field_id, frozen=True)
    label: str
    x: float = Field(default=100, ge=0)
    y: float = Field(default=100, ge=0)
    width: float = Field(default=2500, gt=0)
    """Nominal box width; advisory when auto_width is on."""
    height: float = Field(default=300, gt=0)
    font_size: float = Field(default=200, gt=0)
    font_family: FontFamily = "Arial"
    color: RGBColor = (0, 0, 0)
    align: TextAlign = "center"
    auto_width: bool = False

    @field_validator("color", mode="before")
    @classmethod
    def _parse_color(cls, value: Any) -> Any:
        """Accept "#rrggbb" or CSS color names as well as RGB tuples."""
        if isinstance(value, str):
            try:
                return ImageColor.getrgb(value)[:3]
            except ValueError as e:
                raise ValueError(f"Invalid color '{value}'") from e
        if isinstance(value, (list, tuple)) and len(value) == 4:
            return tuple(value[:3])
        return value

    @field_validator("color")
    @classmethod
    def _check_color_range(cls, value: RGBColor) -> RGBColor:
        if any(channel < 0 or channel > 255 for channel in value):
            raise ValueError(f"Color channels must be within 0-255, got {value}")
        return value

    @property
    def hex_color(self) -> str:
        """Color as a "#rrggbb" string."""
        r, g, b = self.color
        return f"#{r:02x}{g:02x}{b:02x}"


@dataclass
class Template:
    """
    Base certificate image plus its native pixel size.

    The decoded image is cached on first use; decoding the same bytes is deterministic.
    """

    image_bytes: bytes  # Raw image data (PNG, JPEG, ...)
    width: int
    height: int
    name: str = "template"
    _image: Image.Image | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Template dimensions must be positive, got {self.width}x{self.height}")

    @classmethod
    def from_bytes(cls, image_bytes: bytes, name: str = "template") -> "Template":
        """
        Create template reading its native size from the image.

        Raises:
            InvalidTemplateError: If the bytes are not a decodable image.
        """
        width, height = get_image_dimensions(image_bytes)
        return cls(image_bytes=image_bytes, width=width, height=height, name=name)

    @classmethod
    def from_path(cls, path: Path) -> "Template":
        """Load template image from a file."""
        return cls.from_bytes(Path(path).read_bytes(), name=Path(path).stem)

    def image(self) -> Image.Image:
        """
        Get decoded RGBA image sized exactly to width x height.

        Raises:
            InvalidTemplateError: If the image fails to decode.
        """
        if self._image is None:
            self._image = decode_image(self.image_bytes, (self.width, self.height))
        return self._image
