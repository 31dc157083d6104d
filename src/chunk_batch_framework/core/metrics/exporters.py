"""Meter registry adapters for Prometheus and OpenTelemetry.

Both adapters implement :class:`~chunk_batch_framework.core.metrics.registry.MeterRegistry`.
The backing library is imported when an adapter is constructed, so it is
only required for the backend actually configured::

    pip install chunk-batch-framework[metrics]
"""

from __future__ import annotations

import re
import threading
from typing import Any

from chunk_batch_framework.core.config.base import MetricsBackend
from chunk_batch_framework.core.config.hooks import MetricsConfig
from chunk_batch_framework.core.metrics.registry import InMemoryRegistry, MeterRegistry

_INVALID_METRIC_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def _prometheus_name(name: str) -> str:
    return _INVALID_METRIC_CHARS.sub("_", name)


class PrometheusRegistry:
    """Adapter that forwards metrics to ``prometheus_client``.

    Counters map to :class:`~prometheus_client.Counter`, gauges to
    :class:`~prometheus_client.Gauge`, and timers to
    :class:`~prometheus_client.Summary` observed in milliseconds. Metric
    names are sanitized to the Prometheus character set and label names are
    taken from the tags of the first call for each metric.

    Args:
        registry: Collector registry to register into. Defaults to the
            global ``prometheus_client.REGISTRY``.

    Raises:
        ImportError: If ``prometheus_client`` is not installed.
    """

    def __init__(self, registry: Any = None) -> None:
        try:
            import prometheus_client
        except ImportError:
            raise ImportError(
                "prometheus_client is required for PrometheusRegistry. Install it with: pip install prometheus-client"
            ) from None

        self._prometheus = prometheus_client
        self._registry = registry if registry is not None else prometheus_client.REGISTRY
        self._lock = threading.Lock()
        self._metrics: dict[str, dict[str, Any]] = {"counters": {}, "gauges": {}, "timers": {}}

    def counter(
        self,
        name: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        metric = self._get_or_create("counters", self._prometheus.Counter, name, tags)
        (metric.labels(**tags) if tags else metric).inc(value)

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        metric = self._get_or_create("gauges", self._prometheus.Gauge, name, tags)
        (metric.labels(**tags) if tags else metric).set(value)

    def timer(
        self,
        name: str,
        duration_ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        metric = self._get_or_create("timers", self._prometheus.Summary, name, tags)
        (metric.labels(**tags) if tags else metric).observe(duration_ms)

    def get_metrics(self) -> dict[str, Any]:
        """Return registered metric names grouped by kind."""
        with self._lock:
            return {kind: list(metrics.keys()) for kind, metrics in self._metrics.items()}

    def _get_or_create(self, kind: str, factory: Any, name: str, tags: dict[str, str] | None) -> Any:
        with self._lock:
            metrics = self._metrics[kind]
            if name not in metrics:
                label_names = sorted(tags.keys()) if tags else []
                metrics[name] = factory(
                    _prometheus_name(name),
                    f"chunk-batch {kind[:-1]} {name}",
                    label_names,
                    registry=self._registry,
                )
            return metrics[name]


class OpenTelemetryRegistry:
    """Adapter that forwards metrics to the OpenTelemetry metrics API.

    Counters map to ``Counter``, timers to a millisecond ``Histogram`` and
    gauges to an ``UpDownCounter`` that is moved by the difference from the
    last value set for the same tag set, so it reports the absolute value.

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """

    def __init__(self, meter_name: str = "chunk_batch_framework") -> None:
        try:
            from opentelemetry import metrics as otel_metrics
        except ImportError:
            raise ImportError(
                "opentelemetry-api is required for OpenTelemetryRegistry. "
                "Install it with: pip install opentelemetry-api"
            ) from None

        self._meter = otel_metrics.get_meter(meter_name)
        self._lock = threading.Lock()
        self._counters: dict[str, Any] = {}
        self._gauges: dict[str, Any] = {}
        self._gauge_values: dict[tuple[str, tuple[tuple[str, str], ...]], float] = {}
        self._histograms: dict[str, Any] = {}

    def counter(
        self,
        name: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            if name not in self._counters:
                self._counters[name] = self._meter.create_counter(name)
            instrument = self._counters[name]
        instrument.add(value, attributes=tags or {})

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        key = (name, tuple(sorted((tags or {}).items())))
        with self._lock:
            if name not in self._gauges:
                self._gauges[name] = self._meter.create_up_down_counter(name)
            instrument = self._gauges[name]
            delta = value - self._gauge_values.get(key, 0.0)
            self._gauge_values[key] = value
        instrument.add(delta, attributes=tags or {})

    def timer(
        self,
        name: str,
        duration_ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = self._meter.create_histogram(name, unit="ms")
            instrument = self._histograms[name]
        instrument.record(duration_ms, attributes=tags or {})

    def get_metrics(self) -> dict[str, Any]:
        """Return registered metric names grouped by kind."""
        with self._lock:
            return {
                "counters": list(self._counters.keys()),
                "gauges": list(self._gauges.keys()),
                "timers": list(self._histograms.keys()),
            }


def create_registry(config: MetricsConfig) -> MeterRegistry:
    """Build the registry for the configured metrics backend."""
    if config.backend is MetricsBackend.PROMETHEUS:
        return PrometheusRegistry()
    if config.backend is MetricsBackend.OPENTELEMETRY:
        return OpenTelemetryRegistry()
    return InMemoryRegistry()
