from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

LOG_FORMAT_ENV = "PFSENSE_EXPORTER_LOG_FORMAT"
ROOT_SCOPE = "pfsense_exporter"
REDACTED = "[REDACTED]"

# Substrings of extra-field names whose values never reach the log.
_SENSITIVE = ("authorization", "api_key", "key", "password", "secret", "token")

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def scope_of(record: logging.LogRecord) -> str:
    """Short logger name: ``pfsense_exporter.collectors`` logs as ``collectors``."""
    if record.name == ROOT_SCOPE:
        return "main"
    return record.name.removeprefix(ROOT_SCOPE + ".")


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key.startswith("_") or key in _RECORD_ATTRS:
            continue
        out[key] = REDACTED if any(word in key.lower() for word in _SENSITIVE) else value
    return out


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "scope": scope_of(record),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(extra_fields(record))
        return json.dumps(payload, ensure_ascii=True, separators=(",", ":"), default=str)


class ScopeFormatter(logging.Formatter):
    """Plain-text lines: ``<time> level='INFO' scope='collectors' msg='...'``."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y/%m/%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, self.datefmt),
            f"level='{record.levelname}'",
            f"scope='{scope_of(record)}'",
            f"msg='{record.getMessage()}'",
        ]
        parts.extend(f"{key}='{value}'" for key, value in extra_fields(record).items())
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(verbose: bool = False) -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    if os.getenv(LOG_FORMAT_ENV, "json").strip().lower() == "text":
        handler.setFormatter(ScopeFormatter())
    else:
        handler.setFormatter(JsonFormatter())

    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.addHandler(handler)
    # httpx logs every request at INFO; the API client already logs at DEBUG.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
