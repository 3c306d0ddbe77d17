from __future__ import annotations

from pfsense_exporter.client import APIClient
from pfsense_exporter.collectors.base import (
    METRICS_PREFIX,
    BaseCollector,
    GaugeFamily,
    MetricDef,
    percent_to_ratio,
)
from pfsense_exporter.config import TargetConfig
from pfsense_exporter.schemas import SystemStats

SYSTEM_PATH = "/api/v2/status/system"


class SystemCollector(BaseCollector):
    name = "system"
    metrics = (
        MetricDef(METRICS_PREFIX + "system_temperature_celsius", "Current system temperature in Celsius."),
        MetricDef(METRICS_PREFIX + "system_cpu_count", "Number of CPU cores available on the system."),
        MetricDef(METRICS_PREFIX + "system_cpu_usage_ratio", "Current CPU usage as a decimal percentage (0.0 - 1.0)."),
        MetricDef(METRICS_PREFIX + "system_disk_usage_ratio", "Current disk usage as a decimal percentage (0.0 - 1.0)."),
        MetricDef(
            METRICS_PREFIX + "system_memory_usage_ratio",
            "Current memory usage as a decimal percentage (0.0 - 1.0).",
        ),
        MetricDef(METRICS_PREFIX + "system_swap_usage_ratio", "Current swap usage as a decimal percentage (0.0 - 1.0)."),
        MetricDef(METRICS_PREFIX + "system_mbuf_usage_ratio", "Current mbuf usage as a decimal percentage (0.0 - 1.0)."),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        stats: SystemStats = self._fetch(client, SYSTEM_PATH, SystemStats)
        temperature, cpu_count, cpu, disk, memory, swap, mbuf = gauges = self.gauges()
        labels = (target.host,)

        temperature.set(labels, stats.temp_c)
        cpu_count.set(labels, stats.cpu_count)
        cpu.set(labels, percent_to_ratio(stats.cpu_usage))
        disk.set(labels, percent_to_ratio(stats.disk_usage))
        memory.set(labels, percent_to_ratio(stats.mem_usage))
        swap.set(labels, percent_to_ratio(stats.swap_usage))
        mbuf.set(labels, percent_to_ratio(stats.mbuf_usage))
        return gauges
