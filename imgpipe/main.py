from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from imgpipe.config import get_settings
from imgpipe.handlers import transform_handler
from imgpipe.metrics import metrics_response, track_requests
from imgpipe.services.pipeline import ensure_initialized

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ensure_initialized()
    logger.info("Serving assets from %s backend", settings.storage_backend)
    yield


app = FastAPI(title="imgpipe", lifespan=lifespan)
app.middleware("http")(track_requests)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    return metrics_response()


# Registered last: the transform route matches every path.
app.include_router(transform_handler.router)


if __name__ == "__main__":  # pragma: no cover
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
