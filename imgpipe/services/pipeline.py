"""Transformation pipeline.

Stages, in order::

    fetch (fan-out) -> decode -> resize -> rotate? -> composite x N -> encode

Only the fetch stage runs concurrently: the base image and every watermark
are requested at once and the pipeline waits for all of them. Everything
after that depends on the previous stage's output and runs sequentially in a
worker thread so the event loop stays free. Any failure aborts the request;
nothing is retried and no partial image is ever returned.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Sequence

import PIL
from PIL import Image, features

from imgpipe.models import TransformParams, TransformRequest

from .canvas import decode_image, resize_image
from .compositor import composite
from .encoder import encode
from .rotation import rotate
from .storage import AssetStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# One-time codec initialisation
# ---------------------------------------------------------------------------

_init_lock = threading.Lock()
_initialized = False


def ensure_initialized() -> None:
    """Register Pillow's codec plugins once per process.

    Safe to call from any number of threads; only the first call does work.
    """

    global _initialized  # pylint: disable=global-statement
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return
        Image.init()
        if not features.check("webp"):
            logger.warning("Pillow was built without WEBP support; Webp responses will fail.")
        logger.info("Image codecs initialised (Pillow %s).", PIL.__version__)
        _initialized = True


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


async def fetch_assets(store: AssetStore, keys: Sequence[str]) -> list[bytes]:
    """Fetch every key concurrently and return the blobs in the same order."""

    logger.debug("Fetching %d asset(s): %s", len(keys), ", ".join(keys))
    return list(await asyncio.gather(*(asyncio.to_thread(store.fetch, key) for key in keys)))


def render(request: TransformRequest, png_compression: int) -> bytes:
    """Run the decode-to-encode stages for an already fetched request."""

    logger.debug("Decoding base image (%d bytes)", len(request.data))
    canvas = decode_image(request.data, label="base image")
    canvas = resize_image(canvas, request.size)
    canvas = rotate(canvas, request.rotation)

    for index, spec in enumerate(request.watermarks):
        logger.debug("Compositing watermark %d/%d", index + 1, len(request.watermarks))
        canvas = composite(canvas, spec.data, spec, field=f"watermarks[{index}].size ({spec.filename})")

    return encode(canvas, request.format, request.quality, png_compression)


@dataclass(frozen=True)
class TransformResult:
    data: bytes
    media_type: str


class ImagePipeline:
    """Runs one transformation per call; holds no per-request state."""

    def __init__(self, store: AssetStore, *, png_compression: int) -> None:
        self._store = store
        self._png_compression = png_compression

    async def process(self, params: TransformParams) -> TransformResult:
        ensure_initialized()
        logger.info(
            "Processing %s (format=%s, size=%s, rotation=%s, watermarks=%d)",
            params.filename,
            params.format.value,
            params.size,
            params.rotation.value if params.rotation else "-",
            len(params.watermarks),
        )
        blobs = await fetch_assets(self._store, params.keys)
        request = TransformRequest.from_params(params, blobs)
        data = await asyncio.to_thread(render, request, self._png_compression)
        return TransformResult(data=data, media_type=request.format.media_type)
