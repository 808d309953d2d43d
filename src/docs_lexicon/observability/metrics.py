"""Prometheus metrics for the search engine, mirrored to OpenTelemetry meters."""

from __future__ import annotations

from contextlib import contextmanager
import threading
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(
    service_name: str = "docs-lexicon",
    resource_attributes: dict[str, str] | None = None,
    metric_readers: list[MetricReader] | None = None,
) -> MeterProvider:
    """Initialize OpenTelemetry metrics once per process."""
    provider = _meter_holder.get("provider")
    if isinstance(provider, MeterProvider):
        return provider

    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    resource = Resource.create(attributes)
    provider = MeterProvider(resource=resource, metric_readers=metric_readers or [])
    otel_metrics.set_meter_provider(provider)
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = otel_metrics.get_meter(__name__)
    return provider


def _get_meter():
    meter = _meter_holder.get("meter")
    if meter is None:
        init_metrics()
        meter = _meter_holder.get("meter")
    return meter


_INSTRUMENT_FACTORIES = {
    "counter": "create_counter",
    "histogram": "create_histogram",
    "gauge": "create_up_down_counter",
}


class _BoundMetric:
    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._bridge.set(self._labels, value)


class MetricBridge:
    """Record into a Prometheus metric and a matching OTel instrument.

    The OTel instrument is created on first use so importing this module
    never initializes a meter provider. Gauges map to up/down counters, so
    :meth:`set` forwards only the change since the last value per label set.
    """

    def __init__(self, prom_metric: Counter | Histogram | Gauge, *, name: str, description: str, kind: str) -> None:
        if kind not in _INSTRUMENT_FACTORIES:
            raise ValueError(f"Unknown metric kind: {kind}")
        self._prom_metric = prom_metric
        self.name = name
        self._description = description
        self._kind = kind
        self._instrument = None
        self._gauge_values: dict[tuple[tuple[str, str], ...], float] = {}
        self._gauge_lock = threading.Lock()

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _otel(self):
        if self._instrument is None:
            factory = getattr(_get_meter(), _INSTRUMENT_FACTORIES[self._kind])
            self._instrument = factory(self.name, description=self._description)
        return self._instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        self._otel().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        self._otel().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        key = tuple(sorted(labels.items()))
        with self._gauge_lock:
            self._prom_metric.labels(**labels).set(value)
            delta = value - self._gauge_values.get(key, 0.0)
            self._gauge_values[key] = value
            if delta:
                self._otel().add(delta, labels)


SEARCH_LATENCY = MetricBridge(
    Histogram(
        "lexicon_search_latency_seconds",
        "Search query latency",
        ["engine"],
        buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
    ),
    name="lexicon_search_latency_seconds",
    description="Search query latency",
    kind="histogram",
)

INDEX_DOC_COUNT = MetricBridge(
    Gauge("lexicon_index_document_count", "Documents in index", ["engine"]),
    name="lexicon_index_document_count",
    description="Documents in index",
    kind="gauge",
)

UPSERT_COUNT = MetricBridge(
    Counter("lexicon_upserts_total", "Documents inserted or replaced", ["engine", "outcome"]),
    name="lexicon_upserts_total",
    description="Documents inserted or replaced",
    kind="counter",
)

PERSISTENCE_ERRORS = MetricBridge(
    Counter("lexicon_persistence_errors_total", "Cache save/load failures", ["engine", "operation"]),
    name="lexicon_persistence_errors_total",
    description="Cache save/load failures",
    kind="counter",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
