"""Transform endpoint: ``GET /{filename}?<transformation>``."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import ValidationError

from imgpipe.config import Settings, get_settings
from imgpipe.errors import ImageServiceError
from imgpipe.handlers.query import describe_validation_error, parse_transform_query
from imgpipe.services.pipeline import ImagePipeline
from imgpipe.services.storage import AssetStore, get_asset_store

router = APIRouter()
logger = logging.getLogger(__name__)


def get_pipeline(
    store: AssetStore = Depends(get_asset_store),
    settings: Settings = Depends(get_settings),
) -> ImagePipeline:
    return ImagePipeline(store, png_compression=settings.png_compression)


@router.get("/{filename:path}")
async def transform_image(
    filename: str,
    request: Request,
    pipeline: ImagePipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    try:
        params = parse_transform_query(filename, request.query_params.multi_items(), settings)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=describe_validation_error(exc)) from exc

    try:
        result = await pipeline.process(params)
    except ImageServiceError as exc:
        if exc.public:
            logger.info("Rejected request for %s: %s", filename, exc)
        else:
            logger.exception("Error processing %s", filename)
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    return Response(content=result.data, media_type=result.media_type)
