"""Image payload decoding for embedded photos.

Uploads arrive as base64 strings or data URIs. Each one is decoded and
re-encoded with Pillow so that anything the PDF backend might choke on is
caught here and replaced with a placeholder instead.
"""

import base64
import binascii
import io
from dataclasses import dataclass
from typing import Optional

import structlog
from PIL import Image, UnidentifiedImageError

logger = structlog.get_logger()

IMAGE_OK = "ok"
IMAGE_MISSING = "missing"
IMAGE_FAILED = "failed"

# Formats the PDF backend embeds as-is
PASSTHROUGH_FORMATS = {"JPEG": "image/jpeg", "PNG": "image/png"}


@dataclass(frozen=True)
class LoadedImage:
    """Outcome of decoding one image payload.

    ``src`` is a data URI ready for embedding when ``status`` is ``ok``.
    """

    status: str
    src: Optional[str] = None
    width_px: int = 0
    height_px: int = 0


def strip_data_uri(data: str) -> str:
    """Return the base64 body of a data URI, or the input unchanged."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def load_image(data: Optional[str]) -> LoadedImage:
    """Decode and validate an image payload."""
    if not data or not data.strip():
        return LoadedImage(status=IMAGE_MISSING)

    try:
        raw = base64.b64decode(strip_data_uri(data.strip()), validate=True)
        with Image.open(io.BytesIO(raw)) as probe:
            probe.verify()
        with Image.open(io.BytesIO(raw)) as im:
            fmt = im.format
            width, height = im.size
            if fmt in PASSTHROUGH_FORMATS:
                mime, payload = PASSTHROUGH_FORMATS[fmt], raw
            else:
                buffer = io.BytesIO()
                im.convert("RGBA").save(buffer, format="PNG")
                mime, payload = "image/png", buffer.getvalue()
    except (
        binascii.Error,
        ValueError,
        SyntaxError,
        UnidentifiedImageError,
        OSError,
        Image.DecompressionBombError,
    ) as e:
        logger.warning("image_decode_failed", error=str(e), error_type=type(e).__name__)
        return LoadedImage(status=IMAGE_FAILED)

    encoded = base64.b64encode(payload).decode("ascii")
    return LoadedImage(
        status=IMAGE_OK,
        src=f"data:{mime};base64,{encoded}",
        width_px=width,
        height_px=height,
    )
