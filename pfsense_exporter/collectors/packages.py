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
from pfsense_exporter.schemas import PackageStats

PACKAGES_PATH = "/api/v2/system/packages"


class PackageCollector(BaseCollector):
    name = "package"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "package_update_available",
            "Whether an update is available for the package (1) or not (0).",
            ("host", "name", "shortname", "installed_version", "latest_version"),
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        packages: list[PackageStats] = self._fetch(client, PACKAGES_PATH, list[PackageStats])
        (update_available,) = gauges = self.gauges()
        for pkg in packages:
            update_available.set(
                (target.host, pkg.name, pkg.shortname, pkg.installed_version, pkg.latest_version),
                bool_to_float(pkg.update_available),
            )
        return gauges
