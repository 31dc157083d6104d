"""Metrics collection and export."""

from chunk_batch_framework.core.metrics.exporters import OpenTelemetryRegistry, PrometheusRegistry, create_registry
from chunk_batch_framework.core.metrics.registry import InMemoryRegistry, MeterRegistry

__all__ = [
    "InMemoryRegistry",
    "MeterRegistry",
    "OpenTelemetryRegistry",
    "PrometheusRegistry",
    "create_registry",
]
