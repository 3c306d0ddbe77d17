from __future__ import annotations

import logging

from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors.base import METRICS_PREFIX, BaseCollector, GaugeFamily, MetricDef
from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import FirewallStatesStats

logger = logging.getLogger("pfsense_exporter.collectors.firewall_states")

FIREWALL_STATES_PATH = "/api/v2/firewall/states/size"


def effective_maximum(stats: FirewallStatesStats) -> float:
    return stats.maximumstates or stats.defaultmaximumstates


class FirewallStatesCollector(BaseCollector):
    name = "firewall_states"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "firewall_states_maximum_count",
            "Maximum number of firewall states allowed by the host.",
        ),
        MetricDef(
            METRICS_PREFIX + "firewall_states_current_count",
            "Current number of firewall states registered on the host.",
        ),
        MetricDef(
            METRICS_PREFIX + "firewall_states_usage_ratio",
            "Ratio of firewall states currently in use as a decimal percentage (0.0-1.0).",
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        stats: FirewallStatesStats = self._fetch(client, FIREWALL_STATES_PATH, FirewallStatesStats)
        maximum_count, current_count, usage = gauges = self.gauges()
        labels = (target.host,)

        maximum = effective_maximum(stats)
        maximum_count.set(labels, maximum)
        current_count.set(labels, stats.currentstates)
        if maximum:
            usage.set(labels, stats.currentstates / maximum)
        else:
            logger.warning("no maximum state count reported by host %s, omitting usage ratio", target.host)
        return gauges
