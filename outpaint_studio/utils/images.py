"""Image processing utilities for data-URI rasters."""

import base64
import binascii
from io import BytesIO
from typing import Tuple
from PIL import Image, UnidentifiedImageError

from .logger import get_logger
from .errors import DecodeError

logger = get_logger(__name__)

DATA_URI_PREFIX = "data:"


def is_data_uri(value: str) -> bool:
    """True if the value looks like a base64 image data URI."""
    return (
        isinstance(value, str)
        and value.startswith("data:image/")
        and ";base64," in value
    )


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a data URI into its media type and decoded payload.

    Args:
        data_uri: String like ``data:image/png;base64,iVBOR...``

    Returns:
        Tuple of (media_type, raw_bytes)

    Raises:
        DecodeError: If the string is not a base64 data URI
    """
    if not data_uri or not data_uri.startswith(DATA_URI_PREFIX) or "," not in data_uri:
        raise DecodeError("Not a data URI")

    header, payload = data_uri.split(",", 1)
    if not header.endswith(";base64"):
        raise DecodeError("Data URI is not base64 encoded")

    media_type = header[len(DATA_URI_PREFIX):-len(";base64")] or "application/octet-stream"

    try:
        return media_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}")


def bytes_to_data_uri(image_bytes: bytes, media_type: str = "image/png") -> str:
    """Encode raw bytes as a base64 data URI."""
    b64 = base64.b64encode(image_bytes).decode('utf-8')
    return f"data:{media_type};base64,{b64}"


def decode_image(data_uri: str) -> Image.Image:
    """
    Decode a data URI into a fully loaded Pillow image.

    Raises:
        DecodeError: If the payload is not a readable raster image
    """
    _, image_bytes = parse_data_uri(data_uri)

    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
        return image
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Failed to decode image: {e}")


def encode_png(image: Image.Image) -> bytes:
    """Serialize an image to lossless PNG bytes."""
    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def image_to_data_uri(image: Image.Image) -> str:
    """Serialize an image to a PNG data URI."""
    return bytes_to_data_uri(encode_png(image), "image/png")


def data_uri_to_png_bytes(data_uri: str) -> bytes:
    """
    Return PNG bytes for a data URI, transcoding other formats.

    Raises:
        DecodeError: If the payload cannot be decoded
    """
    media_type, image_bytes = parse_data_uri(data_uri)
    if media_type == "image/png":
        return image_bytes

    image = decode_image(data_uri)
    if image.mode not in ('RGB', 'RGBA'):
        if image.mode == 'P':
            # Palette mode - convert to RGBA to preserve transparency
            image = image.convert('RGBA')
        else:
            image = image.convert('RGB')

    logger.debug(
        f"Transcoding {media_type} to PNG",
        extra={"original_kb": len(image_bytes) / 1024}
    )
    return encode_png(image)
