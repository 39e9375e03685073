"""
Reference image handling for pixelforge.

Converts between data URLs (how results are stored) and raw image bytes (how
reference images are attached to requests), and loads user-supplied image
files as PNG for use as a reference.
"""

import base64
import binascii
import io
from pathlib import Path

from PIL import Image

from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import ImageProcessingError, ValidationError

logger = get_logger(__name__)

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

# Supported input formats for reference files
SUPPORTED_FORMATS = {"PNG", "JPEG", "JPG", "WEBP", "GIF", "BMP"}

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def create_image_data_url(encoded_image: str, mime_type: str = "image/png") -> str:
    """Create a data URL from a base64 encoded image."""
    return f"data:{mime_type};base64,{encoded_image}"


def parse_data_url(data_url: str) -> tuple[bytes, str]:
    """
    Parse a data URL (data:image/xxx;base64,yyy) into raw bytes and its MIME type.

    Raises:
        ValidationError: If the string is not a base64 data URL
    """
    data_url = data_url.strip()
    if not data_url.startswith("data:"):
        raise ValidationError("Not a data URL", field="image")
    idx = data_url.find(";base64,")
    if idx == -1:
        raise ValidationError("Data URL missing ;base64, part", field="image")
    try:
        payload = base64.b64decode(data_url[idx + 8 :], validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 in data URL: {e}", field="image") from e
    mime = data_url[5:idx].strip().lower() or "image/png"
    return payload, mime


def extension_for_mime(mime_type: str) -> str:
    """Return a file extension for an image MIME type (png when unknown)."""
    return _EXTENSIONS.get(mime_type.strip().lower(), "png")


def to_png_bytes(data: bytes) -> bytes:
    """
    Return PNG-encoded bytes for an image given in any format Pillow can read.

    PNG input is returned unchanged.

    Raises:
        ImageProcessingError: If the bytes are not a readable image
    """
    if data[:8] == PNG_MAGIC:
        return data
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
    except Exception as e:
        raise ImageProcessingError(f"Failed to convert image to PNG: {str(e)}") from e
    logger.debug("Converted reference image to PNG bytes=%d", buffer.tell())
    return buffer.getvalue()


def load_reference_image(source: str | Path) -> bytes:
    """
    Load a reference image from a file path or data URL and return PNG bytes.

    Raises:
        FileNotFoundError: If the path does not exist
        ValidationError: If the file format is not supported
        ImageProcessingError: If the image cannot be decoded
    """
    if isinstance(source, str) and source.strip().startswith("data:"):
        data, _mime = parse_data_url(source)
        return to_png_bytes(data)

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    suffix = path.suffix.upper().lstrip(".")
    if suffix not in SUPPORTED_FORMATS:
        raise ValidationError(
            f"Unsupported image format: {suffix}. "
            f"Supported formats: {', '.join(sorted(SUPPORTED_FORMATS))}",
            field="image_format",
        )
    try:
        data = path.read_bytes()
        return to_png_bytes(data)
    except ImageProcessingError as e:
        raise ImageProcessingError(str(e), image_path=str(path)) from e
