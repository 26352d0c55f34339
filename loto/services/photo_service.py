"""Source photo handling.

Photos arrive as raw image bytes, travel through the JSON API as base64,
and are stored as an opaque blob on the Source. A decoded preview is
produced on demand; data that cannot be decoded yields no preview rather
than an error.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

from loto.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_SIZE = (320, 320)


def encode_photo(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


def decode_photo(encoded: str) -> bytes:
    """Decode a base64 photo payload.

    Raises:
        ValidationError: If the payload is not valid base64 or is empty.
    """
    if not encoded:
        raise ValidationError("photo is required", details={"photo": "empty payload"})
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("photo must be base64-encoded", details={"photo": str(exc)}) from exc


def make_preview(blob: bytes | None, max_size: tuple[int, int] = DEFAULT_PREVIEW_SIZE) -> bytes | None:
    """Return a PNG thumbnail of ``blob``, or None when it cannot be decoded."""
    if not blob:
        return None
    try:
        with Image.open(io.BytesIO(blob)) as img:
            img.load()
            preview = img.convert("RGBA") if img.mode not in ("RGB", "RGBA", "L") else img.copy()
        preview.thumbnail(max_size)
        out = io.BytesIO()
        preview.save(out, format="png")
        return out.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.warning("Photo preview unavailable: %s", exc)
        return None
