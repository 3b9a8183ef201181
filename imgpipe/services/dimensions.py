"""Target-size computation for the base image and watermark layers.

The resolver keeps the aspect ratio of the original, never upscales, and
truncates the scaled secondary dimension toward zero. Output sizes must match
the reference renders exactly, so truncation stays.
"""
from __future__ import annotations

from typing import Tuple

from imgpipe.errors import InvalidSizeError
from imgpipe.models import Size


def _scale(desired: int, original: int, opposite: int) -> int:
    ratio = desired / original
    return max(1, int(opposite * ratio))


def _has_non_positive(size: Size) -> bool:
    return (size.width is not None and size.width <= 0) or (
        size.height is not None and size.height <= 0
    )


def resolve_target_size(
    original_width: int,
    original_height: int,
    desired: Size,
    *,
    field: str = "size",
) -> Tuple[int, int]:
    """Return the ``(width, height)`` an image should be resized to.

    Raises
    ------
    InvalidSizeError
        If ``desired`` holds a width or height that is zero or negative.
    """

    width, height = desired.width, desired.height

    if desired.is_empty:
        return original_width, original_height

    if _has_non_positive(desired):
        raise InvalidSizeError(desired, field)

    if width is not None and height is not None:
        if width > original_width and height > original_height:
            return original_width, original_height

        ratio_h = height / original_height
        ratio_w = width / original_width
        if ratio_h < ratio_w and ratio_h <= 1.0:
            return _scale(height, original_height, original_width), height
        return width, _scale(width, original_width, original_height)

    if height is not None:
        if height > original_height:
            return original_width, original_height
        return _scale(height, original_height, original_width), height

    if width > original_width:
        return original_width, original_height
    return width, _scale(width, original_width, original_height)
