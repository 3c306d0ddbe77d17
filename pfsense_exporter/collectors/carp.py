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
from pfsense_exporter.schemas import CARPStats, CARPVirtualIP

CARP_STATUS_PATH = "/api/v2/status/carp"
CARP_VIRTUAL_IPS_PATH = "/api/v2/firewall/virtual_ips?mode=carp"

_CARP_STATUS_VALUES = {"master": 1.0, "backup": 0.0}


def carp_status_value(status: str) -> float:
    return _CARP_STATUS_VALUES.get(status, -1.0)


class CARPCollector(BaseCollector):
    """CARP state of the appliance and each CARP virtual IP.

    Both endpoints must answer; if either fails nothing is reported.
    """

    name = "carp"
    metrics = (
        MetricDef(METRICS_PREFIX + "carp_enabled", "Whether CARP is enabled (1 = enabled, 0 = disabled)."),
        MetricDef(
            METRICS_PREFIX + "carp_maintenance_mode_enabled",
            "Whether CARP maintenance mode is enabled (1 = enabled, 0 = disabled).",
        ),
        MetricDef(
            METRICS_PREFIX + "carp_virtual_ip_status",
            "CARP virtual IP status (1 = MASTER, 0 = BACKUP, -1 = OTHER).",
            ("host", "carp_status", "uniqid", "subnet", "vhid", "interface"),
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        stats: CARPStats = self._fetch(client, CARP_STATUS_PATH, CARPStats)
        virtual_ips: list[CARPVirtualIP] = self._fetch(client, CARP_VIRTUAL_IPS_PATH, list[CARPVirtualIP])
        enabled, maintenance, vip_status = gauges = self.gauges()

        enabled.set((target.host,), bool_to_float(stats.enable))
        maintenance.set((target.host,), bool_to_float(stats.maintenance_mode))
        for vip in virtual_ips:
            vip_status.set(
                (target.host, vip.carp_status, vip.uniqid, vip.subnet, str(vip.vhid), vip.interface),
                carp_status_value(vip.carp_status),
            )
        return gauges
