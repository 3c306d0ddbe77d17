from __future__ import annotations

from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors.base import METRICS_PREFIX, BaseCollector, GaugeFamily, MetricDef
from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import InterfaceStats

INTERFACES_PATH = "/api/v2/status/interfaces"
INTERFACE_LABELS = ("host", "name", "descr", "hwif")

# (metric suffix, help text, payload field)
_COUNTERS = (
    ("interface_in_errs_count", "The number of input errors on the interface.", "inerrs"),
    ("interface_out_errs_count", "The number of output errors on the interface.", "outerrs"),
    ("interface_collisions_count", "The number of collisions on the interface.", "collisions"),
    ("interface_in_bytes", "The number of input bytes on the interface.", "inbytes"),
    ("interface_in_pass_bytes", "The number of input bytes passed on the interface.", "inbytespass"),
    ("interface_out_bytes", "The number of output bytes on the interface.", "outbytes"),
    ("interface_out_pass_bytes", "The number of output bytes passed on the interface.", "outbytespass"),
    ("interface_in_pkts_count", "The number of input packets handled by the interface.", "inpkts"),
    ("interface_in_pass_pkts_count", "The number of input packets passed on the interface.", "inpktspass"),
    ("interface_out_pkts_count", "The number of output packets handled by the interface.", "outpkts"),
    ("interface_out_pass_pkts_count", "The number of output packets passed on the interface.", "outpktspass"),
)


def interface_status_value(status: str) -> float:
    return 1.0 if status == "up" else 0.0


class InterfaceCollector(BaseCollector):
    name = "interface"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "interface_up",
            "Whether the interface is up (1) or down (0).",
            (*INTERFACE_LABELS, "status"),
        ),
        *(MetricDef(METRICS_PREFIX + suffix, doc, INTERFACE_LABELS) for suffix, doc, _ in _COUNTERS),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        interfaces: list[InterfaceStats] = self._fetch(client, INTERFACES_PATH, list[InterfaceStats])
        up, *counters = gauges = self.gauges()

        for iface in interfaces:
            labels = (target.host, iface.name, iface.descr, iface.hwif)
            up.set((*labels, iface.status), interface_status_value(iface.status))
            for gauge, (_, _, field) in zip(counters, _COUNTERS):
                gauge.set(labels, getattr(iface, field))
        return gauges
