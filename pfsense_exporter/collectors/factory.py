from __future__ import annotations

from collections.abc import Callable

from pfsense_exporter.collectors.base import Collector
from pfsense_exporter.collectors.carp import CARPCollector
from pfsense_exporter.collectors.firewall_schedules import FirewallScheduleCollector
from pfsense_exporter.collectors.firewall_states import FirewallStatesCollector
from pfsense_exporter.collectors.gateways import GatewayCollector
from pfsense_exporter.collectors.interfaces import InterfaceCollector
from pfsense_exporter.collectors.login_protection import LoginProtectionCollector
from pfsense_exporter.collectors.packages import PackageCollector
from pfsense_exporter.collectors.restapi import RESTAPICollector
from pfsense_exporter.collectors.services import ServiceCollector
from pfsense_exporter.collectors.system import SystemCollector
from pfsense_exporter.registry import Registry

COLLECTOR_TYPES: tuple[Callable[[], Collector], ...] = (
    CARPCollector,
    FirewallScheduleCollector,
    FirewallStatesCollector,
    GatewayCollector,
    InterfaceCollector,
    LoginProtectionCollector,
    PackageCollector,
    RESTAPICollector,
    ServiceCollector,
    SystemCollector,
)


def build_collectors() -> list[Collector]:
    return [factory() for factory in COLLECTOR_TYPES]


def build_registry() -> Registry:
    registry = Registry()
    for collector in build_collectors():
        registry.register(collector)
    registry.freeze()
    return registry
