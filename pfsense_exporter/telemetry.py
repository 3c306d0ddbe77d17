from __future__ import annotations

import time

from fastapi import APIRouter
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_COUNT = Counter(
    "pfsense_exporter_http_requests_total",
    "Total HTTP requests served by the exporter",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "pfsense_exporter_http_request_duration_seconds",
    "Request duration seconds",
    ["method", "path"],
)
SCRAPE_DURATION = Histogram(
    "pfsense_exporter_scrape_duration_seconds",
    "Time spent collecting metrics from one target",
    ["target"],
)
SCRAPE_REJECTED = Counter(
    "pfsense_exporter_scrapes_rejected_total",
    "Scrapes rejected because the target is not configured",
)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        start = time.monotonic()
        response = await call_next(request)
        duration = time.monotonic() - start
        method = request.method
        path = request.url.path
        REQUEST_COUNT.labels(method=method, path=path, status=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration)
        return response


router = APIRouter()


@router.get("/internal/metrics")
def internal_metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
