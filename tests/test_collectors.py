from __future__ import annotations

import logging

import pytest

from conftest import FakeClient, make_target, mock_client, samples, value_of
from pfsense_exporter.client import APIStatusError, APITransportError
from pfsense_exporter.collectors import (
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
from pfsense_exporter.collectors.base import GaugeFamily, MetricDef
from pfsense_exporter.collectors.carp import CARP_STATUS_PATH, CARP_VIRTUAL_IPS_PATH, carp_status_value
from pfsense_exporter.collectors.firewall_states import FIREWALL_STATES_PATH
from pfsense_exporter.collectors.gateways import GATEWAYS_PATH, gateway_status_value
from pfsense_exporter.collectors.interfaces import INTERFACES_PATH, interface_status_value
from pfsense_exporter.collectors.login_protection import SSHGUARD_TABLE_PATH
from pfsense_exporter.collectors.system import SYSTEM_PATH

HOST = "pfsense.test"


def _collect(collector, responses):
    target = make_target()
    client = FakeClient(target, responses)
    return collector.collect(target, client), client


def test_gauge_family_keeps_last_value_per_label_set() -> None:
    gauge = GaugeFamily(MetricDef("pfsense_test", "test", ("host", "name")))
    gauge.set((HOST, "a"), 1)
    gauge.set((HOST, "a"), 2)
    gauge.set((HOST, "b"), 3)

    family = gauge.build()
    assert [(s.labels, s.value) for s in family.samples] == [
        ({"host": HOST, "name": "a"}, 2.0),
        ({"host": HOST, "name": "b"}, 3.0),
    ]


def test_gauge_family_rejects_wrong_label_count() -> None:
    gauge = GaugeFamily(MetricDef("pfsense_test", "test", ("host", "name")))
    with pytest.raises(ValueError):
        gauge.set((HOST,), 1)


@pytest.mark.parametrize(
    ("status", "expected"),
    [("master", 1.0), ("backup", 0.0), ("init", -1.0), ("", -1.0), ("MASTER", -1.0)],
)
def test_carp_status_value(status: str, expected: float) -> None:
    assert carp_status_value(status) == expected


@pytest.mark.parametrize(("status", "expected"), [("up", 1.0), ("down", 0.0), ("no carrier", 0.0), ("", 0.0)])
def test_interface_status_value(status: str, expected: float) -> None:
    assert interface_status_value(status) == expected


@pytest.mark.parametrize(("status", "expected"), [("online", 1.0), ("offline", 0.0), ("down", 0.0)])
def test_gateway_status_value(status: str, expected: float) -> None:
    assert gateway_status_value(status) == expected


def test_describe_returns_families_without_samples() -> None:
    collector = GatewayCollector()
    described = collector.describe()
    assert [family.name for family in described] == [
        "pfsense_gateway_loss_ratio",
        "pfsense_gateway_delay_seconds",
        "pfsense_gateway_stddev_seconds",
        "pfsense_gateway_up",
    ]
    assert all(not family.samples for family in described)


def test_system_collector_converts_percentages() -> None:
    families, _ = _collect(
        SystemCollector(),
        {
            SYSTEM_PATH: {
                "temp_c": 45.5,
                "cpu_count": 4,
                "cpu_usage": 12.5,
                "disk_usage": 50,
                "mem_usage": 25,
                "swap_usage": 0,
                "mbuf_usage": 1,
            }
        },
    )
    assert value_of(families, "pfsense_system_temperature_celsius", host=HOST) == 45.5
    assert value_of(families, "pfsense_system_cpu_count", host=HOST) == 4.0
    assert value_of(families, "pfsense_system_cpu_usage_ratio", host=HOST) == pytest.approx(0.125)
    assert value_of(families, "pfsense_system_disk_usage_ratio", host=HOST) == pytest.approx(0.5)
    assert value_of(families, "pfsense_system_memory_usage_ratio", host=HOST) == pytest.approx(0.25)
    assert value_of(families, "pfsense_system_swap_usage_ratio", host=HOST) == 0.0
    assert value_of(families, "pfsense_system_mbuf_usage_ratio", host=HOST) == pytest.approx(0.01)


def test_interface_collector_reports_status_and_counters() -> None:
    families, _ = _collect(
        InterfaceCollector(),
        {
            INTERFACES_PATH: [
                {"name": "wan", "descr": "WAN", "hwif": "igb0", "status": "up", "inbytes": 1024, "outerrs": 3},
                {"name": "lan", "descr": "LAN", "hwif": "igb1", "status": "no carrier"},
            ]
        },
    )
    assert value_of(families, "pfsense_interface_up", name="wan", status="up") == 1.0
    assert value_of(families, "pfsense_interface_up", name="lan", status="no carrier") == 0.0
    assert value_of(families, "pfsense_interface_in_bytes", name="wan", hwif="igb0") == 1024.0
    assert value_of(families, "pfsense_interface_out_errs_count", name="wan") == 3.0
    assert value_of(families, "pfsense_interface_in_bytes", name="lan") == 0.0
    assert len(families) == 12


def test_gateway_collector_converts_loss_and_delay() -> None:
    families, _ = _collect(
        GatewayCollector(),
        {
            GATEWAYS_PATH: [
                {
                    "name": "WAN_DHCP",
                    "srcip": "203.0.113.2",
                    "monitorip": "203.0.113.1",
                    "loss": 2.5,
                    "delay": 15.3,
                    "stddev": 1.2,
                    "status": "online",
                    "substatus": "none",
                },
                {"name": "WAN2", "srcip": "198.51.100.2", "monitorip": "198.51.100.1", "status": "offline", "substatus": "down"},
            ]
        },
    )
    assert value_of(families, "pfsense_gateway_loss_ratio", name="WAN_DHCP") == pytest.approx(0.025)
    assert value_of(families, "pfsense_gateway_delay_seconds", name="WAN_DHCP") == pytest.approx(0.0153)
    assert value_of(families, "pfsense_gateway_stddev_seconds", name="WAN_DHCP") == pytest.approx(0.0012)
    assert value_of(families, "pfsense_gateway_up", name="WAN_DHCP", substatus="none") == 1.0
    assert value_of(families, "pfsense_gateway_up", name="WAN2", substatus="down") == 0.0


def test_carp_collector_reports_state_and_virtual_ips() -> None:
    families, client = _collect(
        CARPCollector(),
        {
            CARP_STATUS_PATH: {"enable": True, "maintenance_mode": False},
            CARP_VIRTUAL_IPS_PATH: [
                {"carp_status": "master", "uniqid": "a1", "subnet": "10.0.0.1", "vhid": 1, "interface": "lan"},
                {"carp_status": "backup", "uniqid": "b2", "subnet": "10.0.0.2", "vhid": 2, "interface": "lan"},
                {"carp_status": "init", "uniqid": "c3", "subnet": "10.0.0.3", "vhid": 3, "interface": "opt1"},
            ],
        },
    )
    assert value_of(families, "pfsense_carp_enabled", host=HOST) == 1.0
    assert value_of(families, "pfsense_carp_maintenance_mode_enabled", host=HOST) == 0.0
    assert value_of(families, "pfsense_carp_virtual_ip_status", uniqid="a1", vhid="1") == 1.0
    assert value_of(families, "pfsense_carp_virtual_ip_status", uniqid="b2", carp_status="backup") == 0.0
    assert value_of(families, "pfsense_carp_virtual_ip_status", uniqid="c3", interface="opt1") == -1.0
    assert client.calls == [("GET", CARP_STATUS_PATH), ("GET", CARP_VIRTUAL_IPS_PATH)]


def test_carp_collector_reports_nothing_when_second_fetch_fails(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="pfsense_exporter.collectors")
    families, _ = _collect(
        CARPCollector(),
        {
            CARP_STATUS_PATH: {"enable": True, "maintenance_mode": True},
            CARP_VIRTUAL_IPS_PATH: APIStatusError(403, "Forbidden"),
        },
    )
    assert families == []
    assert "carp: failed to fetch from host pfsense.test" in caplog.text


def test_firewall_states_uses_default_maximum_when_unset() -> None:
    families, _ = _collect(
        FirewallStatesCollector(),
        {FIREWALL_STATES_PATH: {"maximumstates": 0, "defaultmaximumstates": 75000, "currentstates": 30000}},
    )
    assert value_of(families, "pfsense_firewall_states_maximum_count", host=HOST) == 75000.0
    assert value_of(families, "pfsense_firewall_states_current_count", host=HOST) == 30000.0
    assert value_of(families, "pfsense_firewall_states_usage_ratio", host=HOST) == pytest.approx(0.4)


def test_firewall_states_prefers_configured_maximum() -> None:
    families, _ = _collect(
        FirewallStatesCollector(),
        {FIREWALL_STATES_PATH: {"maximumstates": 100000, "defaultmaximumstates": 75000, "currentstates": 25000}},
    )
    assert value_of(families, "pfsense_firewall_states_maximum_count", host=HOST) == 100000.0
    assert value_of(families, "pfsense_firewall_states_usage_ratio", host=HOST) == pytest.approx(0.25)


def test_firewall_states_omits_ratio_without_any_maximum(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="pfsense_exporter.collectors.firewall_states")
    families, _ = _collect(
        FirewallStatesCollector(),
        {FIREWALL_STATES_PATH: {"maximumstates": 0, "defaultmaximumstates": 0, "currentstates": 12}},
    )
    found = samples(families)
    assert "pfsense_firewall_states_usage_ratio" not in found
    assert found["pfsense_firewall_states_maximum_count"] == [({"host": HOST}, 0.0)]
    assert found["pfsense_firewall_states_current_count"] == [({"host": HOST}, 12.0)]
    assert "omitting usage ratio" in caplog.text


def test_firewall_schedule_collector() -> None:
    families, _ = _collect(
        FirewallScheduleCollector(),
        {"/api/v2/firewall/schedules": [{"name": "office", "active": True}, {"name": "night", "active": False}]},
    )
    assert value_of(families, "pfsense_firewall_schedule_active", name="office") == 1.0
    assert value_of(families, "pfsense_firewall_schedule_active", name="night") == 0.0


def test_login_protection_collector_counts_blocked_ips() -> None:
    families, _ = _collect(
        LoginProtectionCollector(),
        {SSHGUARD_TABLE_PATH: {"id": "sshguard", "entries": ["192.0.2.10", "192.0.2.11", "192.0.2.10"]}},
    )
    found = samples(families)
    assert sorted(labels["ip"] for labels, _ in found["pfsense_login_protection_blocked_ip"]) == [
        "192.0.2.10",
        "192.0.2.11",
    ]
    assert value_of(families, "pfsense_login_protection_blocked_ip_count", host=HOST) == 3.0


def test_login_protection_collector_with_empty_table() -> None:
    families, _ = _collect(LoginProtectionCollector(), {SSHGUARD_TABLE_PATH: {"id": "sshguard", "entries": []}})
    found = samples(families)
    assert "pfsense_login_protection_blocked_ip" not in found
    assert found["pfsense_login_protection_blocked_ip_count"] == [({"host": HOST}, 0.0)]


def test_package_collector() -> None:
    families, _ = _collect(
        PackageCollector(),
        {
            "/api/v2/system/packages": [
                {
                    "name": "pfSense-pkg-haproxy",
                    "shortname": "haproxy",
                    "installed_version": "0.61_1",
                    "latest_version": "0.62",
                    "update_available": True,
                }
            ]
        },
    )
    assert value_of(families, "pfsense_package_update_available", shortname="haproxy", latest_version="0.62") == 1.0


def test_service_collector() -> None:
    families, _ = _collect(
        ServiceCollector(),
        {
            "/api/v2/status/services": [
                {"name": "unbound", "enabled": True, "status": True},
                {"name": "ntpd", "enabled": True, "status": False},
            ]
        },
    )
    assert value_of(families, "pfsense_service_up", name="unbound") == 1.0
    assert value_of(families, "pfsense_service_up", name="ntpd") == 0.0
    assert value_of(families, "pfsense_service_enabled", name="ntpd") == 1.0


def test_restapi_collector() -> None:
    families, _ = _collect(
        RESTAPICollector(),
        {
            "/api/v2/system/restapi/version": {
                "update_available": False,
                "current_version": "v2.3.0",
                "latest_version": "v2.3.0",
                "latest_version_release_date": "2025-01-01",
            }
        },
    )
    assert value_of(families, "pfsense_restapi_update_available", current_version="v2.3.0") == 0.0


def test_collect_twice_gives_identical_output() -> None:
    collector = GatewayCollector()
    responses = {GATEWAYS_PATH: [{"name": "WAN", "loss": 1, "delay": 2, "stddev": 3, "status": "online"}]}
    first, _ = _collect(collector, responses)
    second, _ = _collect(collector, responses)
    assert samples(first) == samples(second)


def test_removed_label_sets_do_not_linger() -> None:
    collector = ServiceCollector()
    first, _ = _collect(
        collector,
        {"/api/v2/status/services": [{"name": "a", "status": True}, {"name": "b", "status": True}]},
    )
    second, _ = _collect(collector, {"/api/v2/status/services": [{"name": "a", "status": True}]})
    assert len(samples(first)["pfsense_service_up"]) == 2
    assert samples(second)["pfsense_service_up"] == [({"host": HOST, "name": "a"}, 1.0)]


def test_empty_data_reports_nothing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="pfsense_exporter.collectors")
    families, _ = _collect(SystemCollector(), {SYSTEM_PATH: None})
    assert families == []
    assert "system: received nil response from host pfsense.test" in caplog.text


def test_undecodable_data_reports_nothing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="pfsense_exporter.collectors")
    families, _ = _collect(GatewayCollector(), {GATEWAYS_PATH: {"not": "a list"}})
    assert families == []
    assert "gateways: failed to decode response" in caplog.text


def test_transport_failure_reports_nothing() -> None:
    families, _ = _collect(InterfaceCollector(), {INTERFACES_PATH: APITransportError("connection refused")})
    assert families == []


def test_collector_over_http_transport() -> None:
    target = make_target()
    client = mock_client(
        target,
        {
            CARP_STATUS_PATH: {"enable": False, "maintenance_mode": False},
            CARP_VIRTUAL_IPS_PATH: [{"carp_status": "backup", "uniqid": "x", "subnet": "10.0.0.9", "vhid": 9, "interface": "lan"}],
        },
    )
    families = CARPCollector().collect(target, client)
    assert value_of(families, "pfsense_carp_enabled", host=HOST) == 0.0
    assert value_of(families, "pfsense_carp_virtual_ip_status", vhid="9") == 0.0


def test_null_gateway_fields_fall_back_to_defaults() -> None:
    families, _ = _collect(
        GatewayCollector(),
        {
            GATEWAYS_PATH: [
                {
                    "name": "WAN_DHCP",
                    "srcip": "203.0.113.2",
                    "monitorip": "203.0.113.1",
                    "loss": 2.5,
                    "delay": None,
                    "stddev": 1.2,
                    "status": "online",
                    "substatus": None,
                }
            ]
        },
    )
    assert value_of(families, "pfsense_gateway_up", name="WAN_DHCP", substatus="") == 1.0
    assert value_of(families, "pfsense_gateway_delay_seconds", name="WAN_DHCP") == 0.0
    assert value_of(families, "pfsense_gateway_loss_ratio", name="WAN_DHCP") == pytest.approx(0.025)


def test_null_login_protection_entries_count_as_empty() -> None:
    families, _ = _collect(LoginProtectionCollector(), {SSHGUARD_TABLE_PATH: {"id": "sshguard", "entries": None}})
    assert value_of(families, "pfsense_login_protection_blocked_ip_count", host=HOST) == 0.0
