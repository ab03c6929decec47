"""
Image pipeline for uploads.

Decodes a picked image, scales it down to a maximum width, re-encodes it as
JPEG and produces both the upload payload and a data URI for the preview.
Callers check the 5 MB ceiling with ``check_upload_size`` before calling in.
"""
import base64
import logging
import math
import mimetypes
import os
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from core.config import IMAGE_MAX_WIDTH, IMAGE_QUALITY, MAX_UPLOAD_BYTES
from core.errors import ImageDecodeError, ImageEncodeError, ValidationError

logger = logging.getLogger(__name__)

JPEG_MIME = "image/jpeg"


@dataclass
class MediaAsset:
    source_bytes: bytes
    encoded_bytes: bytes
    width: Optional[int]
    height: Optional[int]
    mime_type: str = JPEG_MIME
    filename: str = "image.jpg"
    preview_data_uri: str = ""
    compressed: bool = True

    @property
    def size(self) -> int:
        return len(self.encoded_bytes)

    def as_file_tuple(self):
        """(filename, bytes, mime) triple for a requests multipart upload."""
        return (self.filename, self.encoded_bytes, self.mime_type)


def check_upload_size(size: int, limit: int = MAX_UPLOAD_BYTES):
    """Reject files over the upload ceiling before they reach the pipeline."""
    if size > limit:
        raise ValidationError(f"Image size should be less than {limit // (1024 * 1024)}MB")


def scaled_size(width: int, height: int, max_width: int) -> Tuple[int, int]:
    """Target dimensions: width capped at max_width, aspect ratio kept."""
    if width <= max_width:
        return width, height
    # Round half up
    new_height = int(math.floor(height * max_width / width + 0.5))
    return max_width, max(1, new_height)


def to_data_uri(data: bytes, mime_type: str = JPEG_MIME) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Split a ``data:<mime>;base64,<payload>`` string into (mime, bytes)."""
    if not uri or not uri.startswith("data:") or ";base64," not in uri:
        raise ValueError("Not a base64 data URI")
    header, payload = uri.split(",", 1)
    mime = header[len("data:"):].split(";", 1)[0]
    return mime, base64.b64decode(payload)


def image_size(data: bytes) -> Tuple[int, int]:
    """Decode just enough of an image to read its (width, height)."""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError() from e


def _jpeg_quality(quality: float) -> int:
    # canvas-style 0..1 quality onto Pillow's 1..95 scale
    return min(95, max(1, int(round(quality * 100))))


def _flatten(img: Image.Image) -> Image.Image:
    """JPEG has no alpha: composite transparent images onto white."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def compress_image(
    source_bytes: bytes,
    max_width: int = IMAGE_MAX_WIDTH,
    quality: float = IMAGE_QUALITY,
    filename: str = "image.jpg",
) -> MediaAsset:
    """
    Resize and re-encode an image as JPEG.

    Args:
        source_bytes: Raw file contents
        max_width: Widest allowed output, in pixels
        quality: Lossy quality in [0, 1]
        filename: Original name, used for the upload part

    Returns:
        MediaAsset with the encoded payload and a preview data URI

    Raises:
        ImageDecodeError: the bytes are not a readable image
        ImageEncodeError: the encoder produced nothing
    """
    if max_width < 1:
        raise ValidationError("max_width must be positive")
    if not 0 <= quality <= 1:
        raise ValidationError("quality must be between 0 and 1")

    try:
        img = Image.open(BytesIO(source_bytes))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError() from e

    width, height = scaled_size(img.width, img.height, max_width)
    if (width, height) != img.size:
        img = img.resize((width, height), Image.Resampling.LANCZOS)

    buf = BytesIO()
    try:
        _flatten(img).save(buf, format="JPEG", quality=_jpeg_quality(quality), optimize=True)
    except (OSError, ValueError) as e:
        raise ImageEncodeError() from e

    encoded = buf.getvalue()
    if not encoded:
        raise ImageEncodeError()

    logger.info(
        "Compressed %s: %d KB -> %d KB (%dx%d)",
        filename, len(source_bytes) // 1024, len(encoded) // 1024, width, height,
    )
    return MediaAsset(
        source_bytes=source_bytes,
        encoded_bytes=encoded,
        width=width,
        height=height,
        mime_type=JPEG_MIME,
        filename=_jpeg_name(filename),
        preview_data_uri=to_data_uri(encoded, JPEG_MIME),
        compressed=True,
    )


def prepare_upload(
    source_bytes: bytes,
    filename: str = "image.jpg",
    max_width: int = IMAGE_MAX_WIDTH,
    quality: float = IMAGE_QUALITY,
) -> MediaAsset:
    """
    Compress an image for upload, falling back to the original file.

    If the server later rejects the uncompressed file (HTTP 413) the caller
    shows the "file too large" message from the API client.
    """
    try:
        return compress_image(source_bytes, max_width=max_width, quality=quality, filename=filename)
    except (ImageDecodeError, ImageEncodeError) as e:
        logger.warning("Image compression failed for %s, uploading original: %s", filename, e.message)

    mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    try:
        width, height = image_size(source_bytes)
    except ImageDecodeError:
        width = height = None
    return MediaAsset(
        source_bytes=source_bytes,
        encoded_bytes=source_bytes,
        width=width,
        height=height,
        mime_type=mime_type,
        filename=filename,
        preview_data_uri=to_data_uri(source_bytes, mime_type),
        compressed=False,
    )


def load_upload(path: str, max_width: int = IMAGE_MAX_WIDTH, quality: float = IMAGE_QUALITY) -> MediaAsset:
    """Read a picked file from disk, enforce the size ceiling, then compress it."""
    check_upload_size(os.path.getsize(path))
    with open(path, "rb") as f:
        data = f.read()
    return prepare_upload(data, os.path.basename(path), max_width=max_width, quality=quality)


def _jpeg_name(filename: str) -> str:
    base, _ = os.path.splitext(os.path.basename(filename or "image"))
    return f"{base or 'image'}.jpg"
