from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from prometheus_client.metrics_core import Metric

from pfsense_exporter.client import APIClient
from pfsense_exporter.config import TargetConfig

if TYPE_CHECKING:
    from pfsense_exporter.collectors.base import Collector

logger = logging.getLogger("pfsense_exporter.registry")

_DONE = object()


class Registry:
    """Ordered, append-only set of collectors shared by every scrape.

    Collectors are registered once at startup. After ``freeze()`` the
    registry is read-only, so scrapes can iterate it without locking.
    """

    def __init__(self) -> None:
        self._collectors: list[Collector] = []
        self._frozen = False

    def register(self, collector: Collector) -> None:
        if self._frozen:
            raise RuntimeError(f"cannot register collector {collector.name!r} after the registry is frozen")
        self._collectors.append(collector)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def all(self) -> tuple[Collector, ...]:
        return tuple(self._collectors)

    def names(self) -> list[str]:
        return [collector.name for collector in self._collectors]

    def __len__(self) -> int:
        return len(self._collectors)


class MasterCollector:
    """prometheus_client collector that scrapes one target with every registered collector.

    ``collect()`` starts one thread per registered collector. Threads whose
    collector is not in the target's allow-list return before touching the
    semaphore; the rest take one of ``max_collector_concurrency`` slots for
    the duration of their API calls. Each thread buffers up to
    ``max_collector_buffer_size`` families before handing them to the shared
    queue. ``collect()`` returns once every thread has finished. A failing
    collector is logged and contributes nothing; it never stops the others.
    """

    def __init__(
        self,
        target: TargetConfig,
        registry: Registry,
        client_factory: Callable[[TargetConfig], APIClient] = APIClient,
    ) -> None:
        self.target = target
        self.registry = registry
        self.client_factory = client_factory

    def describe(self) -> Iterator[Metric]:
        for collector in self.registry.all():
            yield from collector.describe()

    def collect(self) -> Iterator[Metric]:
        collectors = self.registry.all()
        client = self.client_factory(self.target)
        output: queue.Queue[object] = queue.Queue()
        slots = threading.BoundedSemaphore(self.target.max_collector_concurrency)

        threads = [
            threading.Thread(
                target=self._run,
                args=(collector, client, slots, output),
                name=f"collector-{collector.name}",
                daemon=True,
            )
            for collector in collectors
        ]
        for thread in threads:
            thread.start()

        pending = len(threads)
        while pending:
            item = output.get()
            if item is _DONE:
                pending -= 1
                continue
            yield item  # type: ignore[misc]

        for thread in threads:
            thread.join()

    def _run(
        self,
        collector: Collector,
        client: APIClient,
        slots: threading.BoundedSemaphore,
        output: queue.Queue[object],
    ) -> None:
        try:
            if not self.target.allows(collector.name):
                logger.debug("skipping collector %s for target %s", collector.name, self.target.host)
                return
            with slots:
                self._collect_into(collector, client, output)
        except Exception:
            logger.exception("collector %s failed for target %s", collector.name, self.target.host)
        finally:
            output.put(_DONE)

    def _collect_into(self, collector: Collector, client: APIClient, output: queue.Queue[object]) -> None:
        buffer: list[Metric] = []
        capacity = self.target.max_collector_buffer_size
        for family in collector.collect(self.target, client):
            buffer.append(family)
            if len(buffer) >= capacity:
                _drain(buffer, output)
        _drain(buffer, output)


def _drain(buffer: list[Metric], output: queue.Queue[object]) -> None:
    for family in buffer:
        output.put(family)
    buffer.clear()
