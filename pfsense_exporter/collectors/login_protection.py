from __future__ import annotations

from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors.base import METRICS_PREFIX, BaseCollector, GaugeFamily, MetricDef
from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import LoginProtectionTable

SSHGUARD_TABLE_PATH = "/api/v2/diagnostics/table?id=sshguard"


class LoginProtectionCollector(BaseCollector):
    name = "login_protection"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "login_protection_blocked_ip",
            "Contains details about IPs blocked by Login Protection.",
            ("host", "ip"),
        ),
        MetricDef(
            METRICS_PREFIX + "login_protection_blocked_ip_count",
            "Current number of IPs actively blocked by Login Protection.",
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        table: LoginProtectionTable = self._fetch(client, SSHGUARD_TABLE_PATH, LoginProtectionTable)
        blocked_ip, blocked_count = gauges = self.gauges()
        for entry in table.entries:
            blocked_ip.set((target.host, entry), 1)
        blocked_count.set((target.host,), len(table.entries))
        return gauges
