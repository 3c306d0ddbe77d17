from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from pfsense_exporter import __version__
from pfsense_exporter.client import APIClient
from pfsense_exporter.config import ExporterConfig, TargetConfig
from pfsense_exporter.registry import Registry
from pfsense_exporter.routes import router as scrape_router
from pfsense_exporter.telemetry import MetricsMiddleware
from pfsense_exporter.telemetry import router as telemetry_router

logger = logging.getLogger("pfsense_exporter.app")


def create_app(
    config: ExporterConfig,
    registry: Registry,
    client_factory: Callable[[TargetConfig], APIClient] = APIClient,
) -> FastAPI:
    if not registry.frozen:
        registry.freeze()

    app = FastAPI(
        title="pfSense Exporter",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.config = config
    app.state.registry = registry
    app.state.client_factory = client_factory

    app.add_middleware(MetricsMiddleware)
    app.include_router(scrape_router)
    app.include_router(telemetry_router)

    @app.get("/healthz")
    def healthz() -> JSONResponse:
        return JSONResponse(content={"status": "ok", "collectors": registry.names()})

    logger.debug("serving %d collectors for %d targets", len(registry), len(config.targets))
    return app
