"""Image processing utilities using Pillow."""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from certgen.errors import InvalidTemplateError


def load_image_from_bytes(image_data: bytes) -> Image.Image:
    """
    Load image from raw bytes.

    Args:
        image_data: Raw image bytes (JPEG, PNG, etc.).

    Returns:
        PIL Image object.

    Raises:
        InvalidTemplateError: If the data is not a decodable image.
    """
    try:
        img = Image.open(BytesIO(image_data))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidTemplateError(f"Template image could not be decoded: {e}") from e
    return img


def decode_image(image_data: bytes, target_size: tuple[int, int]) -> Image.Image:
    """
    Decode image and stretch it to exactly fill target size.

    No cropping and no aspect-ratio correction: the template's aspect ratio is trusted.

    Args:
        image_data: Raw image bytes.
        target_size: Target size as (width, height) in pixels.

    Returns:
        RGBA image of exactly target_size.
    """
    img = load_image_from_bytes(image_data)

    if img.mode != "RGBA":
        img = img.convert("RGBA")

    if img.size != target_size:
        img = img.resize(target_size, Image.Resampling.LANCZOS)

    return img


def save_image_to_bytes(img: Image.Image, format: str = "PNG") -> bytes:
    """
    Save PIL Image to bytes.

    Args:
        img: PIL Image object.
        format: Image format (PNG, JPEG, etc.).

    Returns:
        Image as bytes.
    """
    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def get_image_dimensions(image_data: bytes) -> tuple[int, int]:
    """
    Get dimensions of image without fully loading it.

    Args:
        image_data: Raw image bytes.

    Returns:
        Tuple of (width, height) in pixels.

    Raises:
        InvalidTemplateError: If the data is not a recognizable image.
    """
    try:
        img = Image.open(BytesIO(image_data))
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidTemplateError(f"Template image could not be decoded: {e}") from e
    return (img.width, img.height)
