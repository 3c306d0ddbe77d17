from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Iterator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from prometheus_client.metrics_core import Metric

from pfsense_exporter.app import create_app
from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors import ServiceCollector, SystemCollector
from pfsense_exporter.config import ExporterConfig, TargetConfig
from pfsense_exporter.registry import Registry
from pfsense_exporter.schemas import Envelope


def make_target(**overrides: Any) -> TargetConfig:
    values: dict[str, Any] = {
        "host": "pfsense.test",
        "port": 443,
        "auth_method": "basic",
        "username": "admin",
        "password": "pfsense",
    }
    values.update(overrides)
    return TargetConfig.model_validate(values)


class FakeClient:
    """Stands in for APIClient; maps request paths to payloads or exceptions."""

    def __init__(self, target: TargetConfig, responses: dict[str, Any]) -> None:
        self.target = target
        self.responses = responses
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def fetch(self, method: str, path: str) -> Envelope:
        with self._lock:
            self.calls.append((method, path))
        if path not in self.responses:
            raise AssertionError(f"unexpected request path: {path}")
        result = self.responses[path]
        if isinstance(result, Exception):
            raise result
        return Envelope(code=200, status="ok", response_id="SUCCESS", message="", data=result)


def envelope_body(data: Any, code: int = 200, message: str = "") -> bytes:
    return json.dumps(
        {"code": code, "status": "ok" if code == 200 else "error", "response_id": "X", "message": message, "data": data}
    ).encode()


def mock_client(target: TargetConfig, routes: dict[str, Any]) -> APIClient:
    """APIClient whose transport serves ``routes`` keyed by path with query string."""

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.raw_path.decode()
        if key not in routes:
            return httpx.Response(404, content=envelope_body(None, code=404, message="not found"))
        return httpx.Response(200, content=envelope_body(routes[key]))

    return APIClient(target, transport=httpx.MockTransport(handler))


def samples(families: Iterable[Metric]) -> dict[str, list[tuple[dict[str, str], float]]]:
    out: dict[str, list[tuple[dict[str, str], float]]] = {}
    for family in families:
        for sample in family.samples:
            out.setdefault(sample.name, []).append((dict(sample.labels), sample.value))
    return out


def value_of(families: Iterable[Metric], metric: str, /, **labels: str) -> float:
    for sample_labels, value in samples(families).get(metric, []):
        if all(sample_labels.get(key) == val for key, val in labels.items()):
            return value
    raise KeyError(f"{metric} {labels}")


@pytest.fixture()
def exporter_config() -> ExporterConfig:
    return ExporterConfig(targets=(make_target(), make_target(host="fw2.test", auth_method="key", key="abc123")))


@pytest.fixture()
def client(exporter_config: ExporterConfig) -> TestClient:
    def _client_factory(target: TargetConfig) -> FakeClient:
        return FakeClient(
            target,
            {
                "/api/v2/status/system": {"cpu_count": 2, "cpu_usage": 50},
                "/api/v2/status/services": [{"name": "unbound", "enabled": True, "status": True}],
            },
        )

    registry = Registry()
    registry.register(SystemCollector())
    registry.register(ServiceCollector())
    app = create_app(exporter_config, registry, client_factory=_client_factory)
    return TestClient(app)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(logging.NOTSET)
