import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

from atelier.config import settings

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


class ImageDecodeError(ValueError):
    """Raised when an encoded image cannot be turned into pixels."""


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def strip_data_url(image_b64: str) -> str:
    """Remove a `data:<mime>;base64,` prefix if present."""
    if "," in image_b64:
        image_b64 = image_b64.split(",", 1)[1]
    return image_b64


def decode_image(image_b64: str, max_bytes: int | None = None) -> Image.Image:
    """
    Decode a data URI or raw base64 payload into an RGB Pillow image.

    Transparent images are flattened onto white. The image is fully loaded
    before returning so a truncated payload fails here rather than later.

    Raises:
        ImageDecodeError: payload is not base64, too large, or not an image
    """
    if max_bytes is None:
        max_bytes = settings.max_base_image_bytes

    try:
        image_data = base64.b64decode(strip_data_url(image_b64), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 payload: {e}") from e

    if not image_data:
        raise ImageDecodeError("Empty image payload")
    if len(image_data) > max_bytes:
        raise ImageDecodeError(
            f"Image is {len(image_data)} bytes, limit is {max_bytes}"
        )

    try:
        image = Image.open(io.BytesIO(image_data))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ImageDecodeError(f"Unreadable image: {e}") from e

    # Header size is checked before any pixel data is decoded
    width, height = image.size
    if width * height > settings.max_base_image_pixels:
        raise ImageDecodeError(
            f"Image has {width * height:,} pixels, exceeding maximum "
            f"{settings.max_base_image_pixels:,}"
        )

    try:
        image.load()
    except (Image.DecompressionBombError, OSError) as e:
        raise ImageDecodeError(f"Unreadable image: {e}") from e

    # Convert to RGB if necessary
    if image.mode in ("RGBA", "LA", "P"):
        if image.mode == "P":
            image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        image = background
    elif image.mode != "RGB":
        image = image.convert("RGB")

    return image


def encode_png(image: Image.Image) -> str:
    """Encode a Pillow image as a PNG data URI."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=False)
    b64 = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{b64}"


def normalize_upload(image_b64: str) -> str:
    """
    Validate an uploaded base image and return it as a data URI.

    The data URI is rebuilt from the decoded payload with a prefix matching
    the detected format, so every stored base image is self-describing.

    Raises:
        ImageDecodeError: payload is not a data URI or raw base64 image
    """
    if "," in image_b64 and not image_b64.startswith("data:"):
        raise ImageDecodeError("Expected a data URI or raw base64 payload")

    image = decode_image(image_b64)
    payload = strip_data_url(image_b64)
    detected = Image.open(io.BytesIO(base64.b64decode(payload))).format or "PNG"
    mime_type = MIME_TYPES.get(detected, "image/png")
    logger.info(f"[imaging] Accepted {detected} upload {image.size[0]}x{image.size[1]}")
    return f"data:{mime_type};base64,{payload}"
