from __future__ import annotations

import io
import logging
from typing import Any, Dict

from PIL import Image

from imgpipe.errors import ProcessingError
from imgpipe.models import ImageFormat

logger = logging.getLogger(__name__)


def encode_params(fmt: ImageFormat, quality: int, png_compression: int) -> Dict[str, Any]:
    """Map the output format to Pillow ``save`` keyword arguments.

    PNG ignores the request quality: its level is a deployment-wide
    compression setting, not a fidelity knob.
    """

    if fmt is ImageFormat.PNG:
        return {"compress_level": png_compression}
    if fmt is ImageFormat.JPEG:
        return {"quality": quality, "optimize": True}
    return {"quality": quality}


def encode(canvas: Image.Image, fmt: ImageFormat, quality: int, png_compression: int) -> bytes:
    """Encode the canvas and return the final response bytes."""

    params = encode_params(fmt, quality, png_compression)
    logger.debug("Encoding to %s with %s", fmt.value, params)
    if fmt is ImageFormat.JPEG and canvas.mode != "RGB":
        canvas = canvas.convert("RGB")
    buffer = io.BytesIO()
    try:
        canvas.save(buffer, format=fmt.pil_format, **params)
    except (OSError, ValueError, KeyError) as exc:
        raise ProcessingError(f"Unable to encode {fmt.value}: {exc}") from exc
    return buffer.getvalue()
