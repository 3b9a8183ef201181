from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from imgpipe.errors import ProcessingError
from imgpipe.models import Rotation

logger = logging.getLogger(__name__)

Transpose = Image.Transpose

# Each rotation is a sequence of transposes applied in order.
_STEPS: dict[Rotation, tuple[Image.Transpose, ...]] = {
    Rotation.R90: (Transpose.TRANSPOSE, Transpose.FLIP_LEFT_RIGHT),
    Rotation.R180: (Transpose.ROTATE_180,),
    Rotation.R270: (Transpose.TRANSPOSE, Transpose.FLIP_TOP_BOTTOM),
}


def rotate(canvas: Image.Image, rotation: Optional[Rotation]) -> Image.Image:
    """Rotate the canvas clockwise by 90, 180 or 270 degrees."""

    if rotation is None:
        return canvas
    logger.debug("Rotating canvas %s", rotation.value)
    try:
        for step in _STEPS[rotation]:
            canvas = canvas.transpose(step)
    except (OSError, ValueError) as exc:
        raise ProcessingError(f"Unable to rotate canvas {rotation.value}: {exc}") from exc
    return canvas
