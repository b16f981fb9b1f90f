"""Screenshot transcoding with Pillow."""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 8 * 1024 * 1024
OVERSIZE_QUALITY = 70


class TranscodeError(RuntimeError):
    """Raised when a screenshot cannot be decoded or encoded."""


def _encode(img: Image.Image, output_format: str, quality: int) -> bytes:
    out = BytesIO()
    if output_format == "webp":
        img.save(out, "WEBP", quality=quality, method=4)
    elif output_format == "jpeg":
        img.convert("RGB").save(out, "JPEG", quality=quality, progressive=True, optimize=True)
    elif output_format == "png":
        img.save(out, "PNG", optimize=True)
    else:
        raise TranscodeError(f"Unsupported output format: {output_format}")
    return out.getvalue()


def transcode(
    raw: bytes,
    output_format: str,
    width: int,
    height: int,
    quality: int,
    *,
    max_bytes: int = MAX_OUTPUT_BYTES,
) -> bytes:
    """Cover-fit ``raw`` to ``width``x``height`` and encode it.

    JPEG output over ``max_bytes`` is re-encoded once at ``OVERSIZE_QUALITY``.
    """
    try:
        with Image.open(BytesIO(raw)) as img:
            img.load()
            fitted = ImageOps.fit(
                img, (width, height), method=Image.Resampling.LANCZOS, centering=(0.5, 0.5)
            )
    except (UnidentifiedImageError, OSError) as exc:
        raise TranscodeError(f"Cannot decode screenshot: {exc}") from exc

    data = _encode(fitted, output_format, quality)
    if output_format == "jpeg" and len(data) > max_bytes:
        logger.warning(
            "Encoded image is %d bytes (limit %d), re-encoding at quality %d",
            len(data),
            max_bytes,
            OVERSIZE_QUALITY,
        )
        data = _encode(fitted, output_format, OVERSIZE_QUALITY)
        if len(data) > max_bytes:
            logger.warning("Image still %d bytes after re-encode", len(data))

    if not data:
        raise TranscodeError("Encoder produced an empty image")
    return data
