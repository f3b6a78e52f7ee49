from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .models import TargetState

PREFIX = "hashcheck"

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@dataclass(frozen=True)
class MetricLayout:
    """Which optional metrics and labels a deployment shape exposes."""

    include_duration: bool = False
    include_changes: bool = False
    expose_actual: bool = False


PERSISTENT = MetricLayout(include_duration=True, include_changes=True)
SNAPSHOT = MetricLayout(include_duration=True)
ON_DEMAND = MetricLayout(expose_actual=True)


class MetricSource(ABC):
    """Anything that can describe and collect metric families.

    Matches the custom collector protocol of prometheus_client, so a source
    can be registered on a CollectorRegistry directly."""

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        """Yield metric families without samples."""

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """Yield metric families holding the current values."""


class TargetCollector(MetricSource):
    """Exposes the observation of a single target."""

    def __init__(self, state: TargetState, layout: MetricLayout = PERSISTENT) -> None:
        self._state = state
        self._layout = layout

    @property
    def state(self) -> TargetState:
        return self._state

    def describe(self) -> Iterable[Metric]:
        return self._families(with_samples=False)

    def collect(self) -> Iterable[Metric]:
        return self._families(with_samples=True)

    def _families(self, with_samples: bool) -> List[Metric]:
        target = self._state.target
        obs = self._state.observation
        labels = [target.url]

        families: List[Metric] = []

        def gauge(name: str, doc: str, value: float) -> None:
            family = GaugeMetricFamily(f"{PREFIX}_{name}", doc, labels=["target"])
            if with_samples:
                family.add_metric(labels, value)
            families.append(family)

        gauge("success", "1 if succeed to checking hash else 0", 1 if obs.success else 0)
        gauge("status_code", "status code of HTTP response", obs.status_code)
        gauge("response_bytes", "bytes of HTTP response", obs.response_bytes)
        if self._layout.include_duration:
            gauge("duration_seconds", "taken time to HTTP fetch", obs.duration_seconds)

        if self._layout.include_changes:
            changes = CounterMetricFamily(
                f"{PREFIX}_change_count", "number of page changes", labels=["target"]
            )
            if with_samples:
                changes.add_metric(labels, self._state.change_count)
            families.append(changes)

        # Unverified targets get no correctness series at all.
        if target.verifies:
            label_names = ["target", "expected"]
            label_values = [target.url, target.expected_hash]
            if self._layout.expose_actual:
                label_names.append("actual")
                label_values.append(obs.digest)
            correct = GaugeMetricFamily(
                f"{PREFIX}_correct", "1 if hash is correct else 0", labels=label_names
            )
            if with_samples:
                correct.add_metric(label_values, 1 if obs.correct else 0)
            families.append(correct)

        return families


class WatcherCollector(MetricSource):
    """Composite source forwarding to its members.

    Families with the same name coming from different members are merged so
    each metric name appears once in the exposition."""

    def __init__(self, sources: Iterable[MetricSource]) -> None:
        self._sources = list(sources)

    @property
    def sources(self) -> List[MetricSource]:
        return list(self._sources)

    def describe(self) -> Iterable[Metric]:
        return _merge(family for source in self._sources for family in source.describe())

    def collect(self) -> Iterable[Metric]:
        return _merge(family for source in self._sources for family in source.collect())


def _merge(families: Iterable[Metric]) -> List[Metric]:
    merged: Dict[str, Metric] = {}
    for family in families:
        existing = merged.get(family.name)
        if existing is None:
            merged[family.name] = family
        else:
            existing.samples.extend(family.samples)
    return list(merged.values())


def build_registry(source: MetricSource) -> CollectorRegistry:
    """Create a registry holding source plus the process/runtime collectors.

    Registering a metric name twice raises ValueError from prometheus_client.
    """
    registry = CollectorRegistry()
    registry.register(source)
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    return registry


def render(registry: CollectorRegistry) -> bytes:
    """Serialize registry in the Prometheus text exposition format."""
    return generate_latest(registry)
