from __future__ import annotations

import ipaddress
import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

logger = logging.getLogger("pfsense_exporter.config")

DEFAULT_CONFIG_PATH = Path("config.yml")
DEFAULT_ADDRESS = "localhost"
DEFAULT_PORT = 9945
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_COLLECTOR_CONCURRENCY = 4
DEFAULT_MAX_COLLECTOR_BUFFER_SIZE = 100


class ConfigError(ValueError):
    """Raised when the exporter configuration cannot be loaded or validated."""


class TargetNotFoundError(LookupError):
    pass


class TargetConfig(BaseModel):
    """Connection and scrape settings for one pfSense appliance."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    scheme: Literal["http", "https"] = "https"
    auth_method: Literal["basic", "key"]
    username: str | None = None
    password: str | None = None
    key: str | None = None
    validate_cert: bool = False
    timeout: int = Field(default=DEFAULT_TIMEOUT, gt=5, lt=360)
    collectors: tuple[str, ...] | None = None
    max_collector_concurrency: int = Field(default=DEFAULT_MAX_COLLECTOR_CONCURRENCY, ge=1, le=10)
    max_collector_buffer_size: int = Field(default=DEFAULT_MAX_COLLECTOR_BUFFER_SIZE, ge=10)

    @field_validator("host")
    @classmethod
    def validate_host(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("host is a required field")
        return cleaned

    @field_validator("scheme", mode="before")
    @classmethod
    def default_scheme(cls, value: Any) -> Any:
        if value is None or value == "":
            return "https"
        return value

    @field_validator("timeout", "max_collector_concurrency", "max_collector_buffer_size", mode="before")
    @classmethod
    def zero_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == 0:
            return cls.model_fields[info.field_name].default
        return value

    @model_validator(mode="after")
    def validate_auth(self) -> "TargetConfig":
        if self.auth_method == "basic":
            if not self.username:
                raise ValueError(f"username is required with auth_method 'basic' on host '{self.host}'")
            if not self.password:
                raise ValueError(f"password is required with auth_method 'basic' on host '{self.host}'")
        elif not self.key:
            raise ValueError(f"key is required with auth_method 'key' on host '{self.host}'")
        return self

    def allows(self, collector_name: str) -> bool:
        if not self.collectors:
            return True
        return collector_name in self.collectors


class ExporterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str = DEFAULT_ADDRESS
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    targets: tuple[TargetConfig, ...] = Field(default_factory=tuple)

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_ADDRESS
        host = str(value).strip()
        if host == "localhost":
            return host
        try:
            ipaddress.ip_address(host)
        except ValueError as exc:
            raise ValueError("address must be a valid IP address or 'localhost'") from exc
        return host

    @field_validator("port", mode="before")
    @classmethod
    def default_port(cls, value: Any) -> Any:
        if value is None or value == 0:
            return DEFAULT_PORT
        return value

    def get_target(self, host: str | None) -> TargetConfig:
        for target in self.targets:
            if target.host == host:
                return target
        raise TargetNotFoundError(f"target not configured: {host}")


def _env_overrides() -> dict[str, Any]:
    mapping: dict[str, tuple[str, str]] = {
        "PFSENSE_EXPORTER_ADDRESS": ("address", "str"),
        "PFSENSE_EXPORTER_PORT": ("port", "int"),
    }
    out: dict[str, Any] = {}
    for env_name, (field_name, kind) in mapping.items():
        raw = os.getenv(env_name)
        if raw is None or not raw.strip():
            continue
        if kind == "int":
            try:
                out[field_name] = int(raw)
            except ValueError as exc:
                raise ConfigError(f"{env_name} must be an integer") from exc
        else:
            out[field_name] = raw.strip()
    return out


def _log_target_settings(config: ExporterConfig) -> None:
    for target in config.targets:
        logger.debug("using %s auth for %s", target.auth_method, target.host)
        logger.debug(
            "target %s using %d concurrent collectors and buffer size %d",
            target.host,
            target.max_collector_concurrency,
            target.max_collector_buffer_size,
        )
        if not target.validate_cert:
            logger.warning(
                "certificate validation is disabled for target %s, your credentials may be at risk!",
                target.host,
            )


def parse_config(raw: dict[str, Any]) -> ExporterConfig:
    try:
        config = ExporterConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
    _log_target_settings(config)
    return config


def load_config(config_path: Path | None = None) -> ExporterConfig:
    path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
    try:
        with path.open("r", encoding="utf-8") as handle:
            parsed = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"error reading YAML file at {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing YAML file at {path}: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ConfigError(f"config at {path} must be a YAML mapping")
    parsed.update(_env_overrides())
    return parse_config(parsed)
