"""Rendering modules for certificate images and archives."""

from certgen.render.image import (
    decode_image,
    get_image_dimensions,
    load_image_from_bytes,
    save_image_to_bytes,
)

__all__ = [
    "decode_image",
    "get_image_dimensions",
    "load_image_from_bytes",
    "save_image_to_bytes",
]
