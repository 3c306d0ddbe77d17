from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _drop_nulls(value: Any) -> Any:
    # pfSense sends null for unset fields; treat them as absent
    if isinstance(value, dict):
        return {key: item for key, item in value.items() if item is not None}
    return value


class Envelope(BaseModel):
    """Outer wrapper of every pfSense REST API response.

    ``code`` is the outcome reported by the API itself and may differ from the
    transport-level HTTP status. ``data`` is left undecoded; each collector
    validates it against its own payload model.
    """

    model_config = ConfigDict(extra="ignore")

    code: int = 0
    status: str = ""
    response_id: str = ""
    message: str = ""
    data: Any = None

    @model_validator(mode="before")
    @classmethod
    def null_fields_use_defaults(cls, value: Any) -> Any:
        return _drop_nulls(value)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def null_fields_use_defaults(cls, value: Any) -> Any:
        return _drop_nulls(value)


class SystemStats(_Payload):
    temp_c: float = 0.0
    cpu_count: float = 0.0
    cpu_usage: float = 0.0
    disk_usage: float = 0.0
    mem_usage: float = 0.0
    swap_usage: float = 0.0
    mbuf_usage: float = 0.0


class InterfaceStats(_Payload):
    name: str = ""
    descr: str = ""
    hwif: str = ""
    status: str = ""
    inerrs: float = 0.0
    outerrs: float = 0.0
    collisions: float = 0.0
    inbytes: float = 0.0
    inbytespass: float = 0.0
    outbytes: float = 0.0
    outbytespass: float = 0.0
    inpkts: float = 0.0
    inpktspass: float = 0.0
    outpkts: float = 0.0
    outpktspass: float = 0.0


class GatewayStats(_Payload):
    name: str = ""
    loss: float = 0.0
    delay: float = 0.0
    stddev: float = 0.0
    status: str = ""
    substatus: str = ""
    srcip: str = ""
    monitorip: str = ""


class CARPStats(_Payload):
    enable: bool = False
    maintenance_mode: bool = False


class CARPVirtualIP(_Payload):
    carp_status: str = ""
    uniqid: str = ""
    subnet: str = ""
    vhid: int = 0
    interface: str = ""


class FirewallStatesStats(_Payload):
    maximumstates: float = 0.0
    defaultmaximumstates: float = 0.0
    currentstates: float = 0.0


class FirewallSchedule(_Payload):
    name: str = ""
    active: bool = False


class LoginProtectionTable(_Payload):
    id: str = ""
    entries: list[str] = Field(default_factory=list)


class PackageStats(_Payload):
    name: str = ""
    shortname: str = ""
    installed_version: str = ""
    latest_version: str = ""
    update_available: bool = False


class ServiceStats(_Payload):
    name: str = ""
    enabled: bool = False
    status: bool = False


class RESTAPIVersion(_Payload):
    update_available: bool = False
    current_version: str = ""
    latest_version: str = ""
    latest_version_release_date: str = ""
