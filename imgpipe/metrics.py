"""Prometheus metrics and access logging for every HTTP request."""
from __future__ import annotations

import logging
import time

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger("imgpipe.access")

registry = CollectorRegistry()

REQUESTS = Counter(
    "imgpipe_http_requests_total",
    "HTTP requests handled, by route template and status.",
    ["method", "path", "status"],
    registry=registry,
)
LATENCY = Histogram(
    "imgpipe_http_request_duration_seconds",
    "Time spent handling a request, by route template.",
    ["method", "path"],
    registry=registry,
)


def _route_path(request: Request) -> str:
    # Label by template, not by asset key, to keep cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


async def track_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    path = _route_path(request)
    REQUESTS.labels(request.method, path, str(response.status_code)).inc()
    LATENCY.labels(request.method, path).observe(elapsed)
    logger.info(
        '%s "%s %s" %s %.1fms',
        request.client.host if request.client else "-",
        request.method,
        request.url.path,
        response.status_code,
        elapsed * 1000,
    )
    return response


def metrics_response() -> Response:
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
