from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Sequence

from prometheus_client import CollectorRegistry

from .controller import ProbeScheduler
from .errors import BadRequest
from .metrics import (
    ON_DEMAND,
    PERSISTENT,
    SNAPSHOT,
    MetricLayout,
    TargetCollector,
    WatcherCollector,
    build_registry,
    render,
)
from .models import Target, TargetState

logger = logging.getLogger(__name__)


class ScrapeHandler(ABC):
    """Turns one scrape request into an exposition body."""

    @abstractmethod
    def scrape(self, params: Mapping[str, Sequence[str]]) -> bytes:
        """Handle a scrape with the request's query parameters."""
        raise NotImplementedError


def _probe_and_render(
    scheduler: ProbeScheduler, states: Sequence[TargetState], layout: MetricLayout
) -> bytes:
    """Probe states, then render them through a registry built for this request only."""
    logger.debug("probing %d targets", len(states))
    scheduler.run_all(states)
    logger.debug("rendering %d targets", len(states))
    registry = build_registry(WatcherCollector(TargetCollector(s, layout) for s in states))
    return render(registry)


class Watcher(ScrapeHandler):
    """Long-lived targets with a registry built once at startup.

    Target state persists between scrapes, which is what makes the change
    counter meaningful. Probe cycles are serialised so concurrent scrapes
    never write the same target's observation at once. When probing is
    driven by a BackgroundProber, scrape() only renders.
    """

    def __init__(
        self,
        targets: Iterable[Target],
        scheduler: ProbeScheduler,
        interval_driven: bool = False,
    ) -> None:
        self._scheduler = scheduler
        self._interval_driven = interval_driven
        self._states = [TargetState(target=t) for t in targets]
        self._lock = threading.Lock()
        self._collector = WatcherCollector(TargetCollector(s, PERSISTENT) for s in self._states)
        self._registry = build_registry(self._collector)

    @property
    def states(self) -> List[TargetState]:
        return list(self._states)

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @property
    def interval_driven(self) -> bool:
        return self._interval_driven

    def probe(self) -> None:
        with self._lock:
            logger.debug("probing %d targets", len(self._states))
            self._scheduler.run_all(self._states)

    def scrape(self, params: Mapping[str, Sequence[str]]) -> bytes:
        if not self._interval_driven:
            self.probe()
        return render(self._registry)


class SnapshotExporter(ScrapeHandler):
    """Static targets, no state kept between scrapes."""

    def __init__(self, targets: Iterable[Target], scheduler: ProbeScheduler) -> None:
        self._targets = list(targets)
        self._scheduler = scheduler

    @property
    def targets(self) -> List[Target]:
        return list(self._targets)

    def scrape(self, params: Mapping[str, Sequence[str]]) -> bytes:
        states = [TargetState(target=t) for t in self._targets]
        return _probe_and_render(self._scheduler, states, SNAPSHOT)


class OnDemandExporter(ScrapeHandler):
    """Probes the single target named by the request's target and hash parameters."""

    def __init__(self, scheduler: ProbeScheduler) -> None:
        self._scheduler = scheduler

    def scrape(self, params: Mapping[str, Sequence[str]]) -> bytes:
        url = _first(params, "target")
        expected = _first(params, "hash")
        if not url:
            raise BadRequest("missing required query param: target")
        if not expected:
            raise BadRequest("missing required query param: hash")

        state = TargetState(target=Target(url=url, expected_hash=expected.lower()))
        return _probe_and_render(self._scheduler, [state], ON_DEMAND)


def _first(params: Mapping[str, Sequence[str]], name: str) -> str:
    values = params.get(name) or []
    return values[0].strip() if values else ""
