#!/usr/bin/env python
"""Render a transformation from a local asset directory to a file."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from imgpipe.config import get_settings
from imgpipe.models import (
    ImageFormat,
    OriginPolicy,
    Point,
    Rotation,
    Size,
    TransformParams,
    WatermarkParams,
)
from imgpipe.services.pipeline import ImagePipeline
from imgpipe.services.storage import LocalAssetStore


def _watermark(value: str) -> WatermarkParams:
    """Parse ``key[:origin[:x,y[:alpha[:WxH]]]]``, e.g. ``logo.png:RightBottom:10,10:0.5:64x64``."""

    parts = value.split(":")
    params: dict = {"filename": parts[0]}
    if len(parts) > 1 and parts[1]:
        params["origin"] = OriginPolicy(parts[1])
    if len(parts) > 2 and parts[2]:
        x, y = parts[2].split(",")
        params["position"] = Point(x=int(x), y=int(y))
    if len(parts) > 3 and parts[3]:
        params["alpha"] = float(parts[3])
    if len(parts) > 4 and parts[4]:
        width, height = parts[4].split("x")
        params["size"] = Size(width=int(width) if width else None, height=int(height) if height else None)
    return WatermarkParams(**params)


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Render an image transformation locally")
    parser.add_argument("filename", help="Base image key, relative to --assets")
    parser.add_argument("--assets", default=settings.local_asset_dir)
    parser.add_argument("--output", required=True, type=Path)
    parser.add_argument("--width", type=int)
    parser.add_argument("--height", type=int)
    parser.add_argument("--format", default=settings.default_format.value, type=ImageFormat)
    parser.add_argument("--quality", type=int, default=settings.default_quality)
    parser.add_argument("--rotation", type=Rotation)
    parser.add_argument("--watermark", action="append", default=[], type=_watermark)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    params = TransformParams(
        filename=args.filename,
        size=Size(width=args.width, height=args.height),
        format=args.format,
        quality=args.quality,
        rotation=args.rotation,
        watermarks=tuple(args.watermark),
    )
    pipeline = ImagePipeline(LocalAssetStore(args.assets), png_compression=settings.png_compression)
    result = asyncio.run(pipeline.process(params))
    args.output.write_bytes(result.data)
    print(f"Wrote {len(result.data)} bytes ({result.media_type}) to {args.output}")


if __name__ == "__main__":
    main()
