from pfsense_exporter.collectors.base import BaseCollector, Collector, GaugeFamily, MetricDef
from pfsense_exporter.collectors.carp import CARPCollector
from pfsense_exporter.collectors.factory import build_collectors, build_registry
from pfsense_exporter.collectors.firewall_schedules import FirewallScheduleCollector
from pfsense_exporter.collectors.firewall_states import FirewallStatesCollector
from pfsense_exporter.collectors.gateways import GatewayCollector
from pfsense_exporter.collectors.interfaces import InterfaceCollector
from pfsense_exporter.collectors.login_protection import LoginProtectionCollector
from pfsense_exporter.collectors.packages import PackageCollector
from pfsense_exporter.collectors.restapi import RESTAPICollector
from pfsense_exporter.collectors.services import ServiceCollector
from pfsense_exporter.collectors.system import SystemCollector

__all__ = [
    "Collector",
    "BaseCollector",
    "GaugeFamily",
    "MetricDef",
    "CARPCollector",
    "FirewallScheduleCollector",
    "FirewallStatesCollector",
    "GatewayCollector",
    "InterfaceCollector",
    "LoginProtectionCollector",
    "PackageCollector",
    "RESTAPICollector",
    "ServiceCollector",
    "SystemCollector",
    "build_collectors",
    "build_registry",
]
