"""Pillow helpers shared by the pipeline stages: decoding and resizing."""
from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from imgpipe.errors import DecodeError, ProcessingError
from imgpipe.models import Size

from .dimensions import resolve_target_size

logger = logging.getLogger(__name__)


def decode_image(data: bytes, *, mode: str = "RGB", label: str = "image") -> Image.Image:
    """Decode raw bytes, honour EXIF orientation and convert to ``mode``."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            return oriented.convert(mode)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Unable to decode {label}: {exc}") from exc


def resize_image(img: Image.Image, desired: Size, *, field: str = "size") -> Image.Image:
    """Resize ``img`` to the box resolved for ``desired``.

    Returns the input unchanged when the target equals the current size.
    """

    original_width, original_height = img.size
    target = resolve_target_size(original_width, original_height, desired, field=field)
    logger.debug(
        "Resizing %s from %sx%s to %sx%s (desired %s)",
        field, original_width, original_height, target[0], target[1], desired,
    )
    if target == img.size:
        return img
    try:
        return img.resize(target, Image.Resampling.BILINEAR)
    except (OSError, ValueError) as exc:
        raise ProcessingError(f"Unable to resize {field} to {target}: {exc}") from exc
