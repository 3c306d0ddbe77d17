from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException, Request
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from starlette.responses import Response

from pfsense_exporter.config import ExporterConfig, TargetNotFoundError
from pfsense_exporter.registry import MasterCollector
from pfsense_exporter.telemetry import SCRAPE_DURATION, SCRAPE_REJECTED

logger = logging.getLogger("pfsense_exporter.routes")

router = APIRouter()


@router.get("/metrics")
def scrape(request: Request, target: str | None = None) -> Response:
    config: ExporterConfig = request.app.state.config
    try:
        target_config = config.get_target(target)
    except TargetNotFoundError:
        logger.warning("rejected scrape for unknown target %r", target)
        SCRAPE_REJECTED.inc()
        raise HTTPException(status_code=400, detail="Bad target") from None

    # A fresh registry per scrape keeps targets isolated from each other.
    registry = CollectorRegistry()
    registry.register(
        MasterCollector(
            target_config,
            request.app.state.registry,
            client_factory=request.app.state.client_factory,
        )
    )

    start = time.monotonic()
    payload = generate_latest(registry)
    SCRAPE_DURATION.labels(target=target_config.host).observe(time.monotonic() - start)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
