from __future__ import annotations

from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors.base import (
    METRICS_PREFIX,
    BaseCollector,
    GaugeFamily,
    MetricDef,
    bool_to_float,
)
from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import ServiceStats

SERVICES_PATH = "/api/v2/status/services"


class ServiceCollector(BaseCollector):
    name = "service"
    metrics = (
        MetricDef(METRICS_PREFIX + "service_up", "Whether the service is up (1) or down (0).", ("host", "name")),
        MetricDef(
            METRICS_PREFIX + "service_enabled",
            "Whether the service is enabled (1) or disabled (0).",
            ("host", "name"),
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        services: list[ServiceStats] = self._fetch(client, SERVICES_PATH, list[ServiceStats])
        up, enabled = gauges = self.gauges()
        for svc in services:
            up.set((target.host, svc.name), bool_to_float(svc.status))
            enabled.set((target.host, svc.name), bool_to_float(svc.enabled))
        return gauges
