from __future__ import annotations

from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors.base import (
    METRICS_PREFIX,
    BaseCollector,
    GaugeFamily,
    MetricDef,
    millis_to_seconds,
    percent_to_ratio,
)
from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import GatewayStats

GATEWAYS_PATH = "/api/v2/status/gateways"
GATEWAY_LABELS = ("host", "name", "srcip", "monitorip")


def gateway_status_value(status: str) -> float:
    return 1.0 if status == "online" else 0.0


class GatewayCollector(BaseCollector):
    name = "gateways"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "gateway_loss_ratio",
            "The loss ratio of the gateway as a decimal percentage (0.0 - 1.0).",
            GATEWAY_LABELS,
        ),
        MetricDef(METRICS_PREFIX + "gateway_delay_seconds", "The delay of the gateway in seconds.", GATEWAY_LABELS),
        MetricDef(
            METRICS_PREFIX + "gateway_stddev_seconds",
            "The standard deviation of the gateway delay in seconds.",
            GATEWAY_LABELS,
        ),
        MetricDef(
            METRICS_PREFIX + "gateway_up",
            "The status of the gateway (0 = down, 1 = up).",
            (*GATEWAY_LABELS, "substatus"),
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        gateways: list[GatewayStats] = self._fetch(client, GATEWAYS_PATH, list[GatewayStats])
        loss, delay, stddev, up = gauges = self.gauges()

        for gw in gateways:
            labels = (target.host, gw.name, gw.srcip, gw.monitorip)
            loss.set(labels, percent_to_ratio(gw.loss))
            delay.set(labels, millis_to_seconds(gw.delay))
            stddev.set(labels, millis_to_seconds(gw.stddev))
            up.set((*labels, gw.substatus), gateway_status_value(gw.status))
        return gauges
