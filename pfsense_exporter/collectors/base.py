from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from pydantic import TypeAdapter, ValidationError

from pfsense_exporter.client import APIClient, APIError
from pfsense_exporter.config import TargetConfig

logger = logging.getLogger("pfsense_exporter.collectors")

METRICS_PREFIX = "pfsense_"


class Collector(Protocol):
    name: str

    def describe(self) -> list[Metric]:
        """Return metric families without samples. Must not perform I/O."""

    def collect(self, target: TargetConfig, client: APIClient) -> list[Metric]:
        """Fetch from the target and return fresh metric families."""


class EmptyResponseError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class MetricDef:
    name: str
    documentation: str
    labels: tuple[str, ...] = ("host",)

    def family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.labels))


class GaugeFamily:
    """Builds one gauge family for a single collection.

    Samples are keyed by their label values, so setting the same label set
    twice keeps only the last value.
    """

    def __init__(self, definition: MetricDef) -> None:
        self.definition = definition
        self._samples: dict[tuple[str, ...], float] = {}

    def set(self, label_values: Sequence[Any], value: float) -> None:
        key = tuple(str(item) for item in label_values)
        if len(key) != len(self.definition.labels):
            raise ValueError(
                f"{self.definition.name} expects {len(self.definition.labels)} label values, got {len(key)}"
            )
        self._samples[key] = float(value)

    def __len__(self) -> int:
        return len(self._samples)

    def build(self) -> GaugeMetricFamily:
        family = self.definition.family()
        for label_values, value in self._samples.items():
            family.add_metric(list(label_values), value)
        return family


def bool_to_float(value: bool) -> float:
    return 1.0 if value else 0.0


def percent_to_ratio(value: float) -> float:
    # API reports 0-100
    return value / 100.0


def millis_to_seconds(value: float) -> float:
    return value / 1000.0


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


class BaseCollector:
    """Shared fetch/decode/error handling for pfSense resource collectors.

    Subclasses set ``name`` and ``metrics`` and implement ``_collect``, which
    returns the gauges it filled. Any API, decode or empty-response error is
    logged here and the collector contributes nothing to the scrape.
    """

    name: str = ""
    metrics: tuple[MetricDef, ...] = ()

    def describe(self) -> list[Metric]:
        return [definition.family() for definition in self.metrics]

    def gauges(self) -> tuple[GaugeFamily, ...]:
        return tuple(GaugeFamily(definition) for definition in self.metrics)

    def collect(self, target: TargetConfig, client: APIClient) -> list[Metric]:
        try:
            gauges = self._collect(target, client)
        except APIError as exc:
            logger.error("%s: failed to fetch from host %s: %s", self.name, target.host, exc)
            return []
        except EmptyResponseError:
            logger.error("%s: received nil response from host %s", self.name, target.host)
            return []
        except ValidationError as exc:
            logger.error("%s: failed to decode response from host %s: %s", self.name, target.host, exc)
            return []
        return [gauge.build() for gauge in gauges if len(gauge)]

    def _fetch(self, client: APIClient, path: str, shape: Any) -> Any:
        envelope = client.fetch("GET", path)
        if envelope.data is None:
            raise EmptyResponseError(path)
        return _adapter(shape).validate_python(envelope.data)

    def _collect(self, target: TargetConfig, client: APIClient) -> Sequence[GaugeFamily]:
        raise NotImplementedError
