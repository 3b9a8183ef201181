"""Overlay a watermark layer onto the canvas.

The layer is sized on its own native dimensions, its alpha channel is scaled
uniformly to the requested opacity, and the result is alpha-composited onto
the canvas at the resolved offset. Pixels outside the layer are untouched.
"""
from __future__ import annotations

import logging
import math
from typing import Tuple

from PIL import Image

from imgpipe.errors import ProcessingError
from imgpipe.models import OriginPolicy, WatermarkSpec

from .canvas import decode_image, resize_image
from .placement import resolve_placement

logger = logging.getLogger(__name__)


def _clamp_alpha(alpha: float) -> float:
    if 0.0 <= alpha <= 1.0:
        return alpha
    clamped = 0.0 if math.isnan(alpha) else min(max(alpha, 0.0), 1.0)
    logger.warning("Watermark alpha %s out of range, using %s", alpha, clamped)
    return clamped


def apply_opacity(layer: Image.Image, alpha: float) -> Image.Image:
    """Return an RGBA copy of ``layer`` with every alpha value scaled by ``alpha``."""

    layer = layer.convert("RGBA")
    if alpha >= 1.0:
        return layer
    band = layer.getchannel("A").point(lambda value: int(round(value * alpha)))
    layer.putalpha(band)
    return layer


def _crop_box(layer_size: Tuple[int, int], canvas_size: Tuple[int, int], origin: OriginPolicy) -> Tuple[int, int, int, int]:
    """Box keeping the part of an oversized layer nearest its anchor corner."""

    width, height = min(layer_size[0], canvas_size[0]), min(layer_size[1], canvas_size[1])
    extra_w, extra_h = layer_size[0] - width, layer_size[1] - height
    if origin is OriginPolicy.RIGHT_BOTTOM:
        left, top = extra_w, extra_h
    elif origin is OriginPolicy.CENTER:
        left, top = extra_w // 2, extra_h // 2
    else:
        left, top = 0, 0
    return left, top, left + width, top + height


def composite(
    canvas: Image.Image,
    layer_bytes: bytes,
    spec: WatermarkSpec,
    *,
    field: str = "watermark size",
) -> Image.Image:
    """Composite one watermark onto ``canvas`` and return the new canvas.

    ``field`` names the watermark in error messages.

    Raises
    ------
    DecodeError
        If ``layer_bytes`` is not an image.
    InvalidSizeError
        If ``spec.size`` holds a non-positive dimension.
    ProcessingError
        If Pillow fails while blending.
    """

    layer = decode_image(layer_bytes, mode="RGBA", label=spec.filename or "watermark")
    layer = resize_image(layer, spec.size, field=field)

    if layer.width > canvas.width or layer.height > canvas.height:
        logger.debug("Cropping watermark %sx%s to canvas %sx%s", *layer.size, *canvas.size)
        layer = layer.crop(_crop_box(layer.size, canvas.size, spec.origin))

    placement = resolve_placement(
        canvas.width, canvas.height, layer.width, layer.height, spec.position, spec.origin
    )
    logger.debug(
        "Watermark placement (%s): left=%s top=%s right=%s bottom=%s",
        spec.origin.value, *placement,
    )

    try:
        layer = apply_opacity(layer, _clamp_alpha(spec.alpha))
        result = canvas.convert("RGBA")
        result.alpha_composite(layer, dest=placement.offset)
        return result.convert(canvas.mode)
    except (OSError, ValueError) as exc:
        raise ProcessingError(f"Unable to composite watermark: {exc}") from exc
