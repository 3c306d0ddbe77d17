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
from pfsense_exporter.schemas import RESTAPIVersion

RESTAPI_VERSION_PATH = "/api/v2/system/restapi/version"


class RESTAPICollector(BaseCollector):
    name = "restapi"
    metrics = (
        MetricDef(
            METRICS_PREFIX + "restapi_update_available",
            "Whether a REST API update is available (1 = available, 0 = not available).",
            ("host", "current_version", "latest_version", "latest_version_release_date"),
        ),
    )

    def _collect(self, target: TargetConfig, client: APIClient) -> tuple[GaugeFamily, ...]:
        version: RESTAPIVersion = self._fetch(client, RESTAPI_VERSION_PATH, RESTAPIVersion)
        (update_available,) = gauges = self.gauges()
        update_available.set(
            (target.host, version.current_version, version.latest_version, version.latest_version_release_date),
            bool_to_float(version.update_available),
        )
        return gauges
