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
from pfsense_exporter.schemas import FirewallSchedule

FIREWALL_SCHEDULES_PATH = "/api/v2/firewall/schedules"


class FirewallScheduleCollector(BaseCollector):
    name = "firewall_schedule"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "firewall_schedule_active",
            "Whether the firewall schedule is active (1) or inactive (0).",
            ("host", "name"),
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        schedules: list[FirewallSchedule] = self._fetch(client, FIREWALL_SCHEDULES_PATH, list[FirewallSchedule])
        (active,) = gauges = self.gauges()
        for schedule in schedules:
            active.set((target.host, schedule.name), bool_to_float(schedule.active))
        return gauges
