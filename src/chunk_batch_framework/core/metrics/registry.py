"""Meter registry protocol and the in-memory default.

Job listeners record counters (items read/written/skipped), gauges and
timers (job and step durations) through a :class:`MeterRegistry`.
Exporter adapters in :mod:`chunk_batch_framework.core.metrics.exporters`
forward the same calls to Prometheus or OpenTelemetry.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MeterRegistry(Protocol):
    """Protocol for recording batch metrics.

    All methods must be safe to call from multiple threads, since several
    job executions may share one registry.
    """

    def counter(
        self,
        name: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter (e.g. ``"cbf_items_written"``)."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge to an absolute value."""
        ...

    def timer(
        self,
        name: str,
        duration_ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds (e.g. ``"cbf_step_duration_ms"``)."""
        ...

    def get_metrics(self) -> dict[str, Any]:
        """Return a snapshot of recorded metrics; structure is implementation-defined."""
        ...


def _series_key(tags: dict[str, str] | None) -> str:
    if not tags:
        return ""
    return ",".join(f"{k}={v}" for k, v in sorted(tags.items()))


@dataclass
class _Series:
    tags: dict[str, str] = field(default_factory=dict)
    value: float = 0.0
    count: int = 0


class InMemoryRegistry:
    """Thread-safe registry that keeps every series in memory.

    Used by default when no external backend is configured, and by tests to
    assert on what a run recorded.
    """

    _KINDS = ("counters", "gauges", "timers")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._series: dict[str, dict[str, dict[str, _Series]]] = {kind: {} for kind in self._KINDS}

    def _entry(self, kind: str, name: str, tags: dict[str, str] | None) -> _Series:
        bucket = self._series[kind].setdefault(name, {})
        key = _series_key(tags)
        if key not in bucket:
            bucket[key] = _Series(tags=dict(tags or {}))
        return bucket[key]

    def _lookup(self, kind: str, name: str, tags: dict[str, str] | None) -> _Series | None:
        return self._series[kind].get(name, {}).get(_series_key(tags))

    def counter(
        self,
        name: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            entry = self._entry("counters", name, tags)
            entry.value += value
            entry.count += 1

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            entry = self._entry("gauges", name, tags)
            entry.value = value
            entry.count += 1

    def timer(
        self,
        name: str,
        duration_ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            entry = self._entry("timers", name, tags)
            entry.value += duration_ms
            entry.count += 1

    def get_metrics(self) -> dict[str, Any]:
        """Return ``{"counters": ..., "gauges": ..., "timers": ...}``.

        Counters and gauges map ``name -> {series_key: value}``; timers map
        ``name -> {series_key: {"total_ms", "count", "tags"}}``.
        """
        with self._lock:
            snapshot: dict[str, Any] = {
                kind: {
                    name: {key: entry.value for key, entry in buckets.items()}
                    for name, buckets in self._series[kind].items()
                }
                for kind in ("counters", "gauges")
            }
            snapshot["timers"] = {
                name: {
                    key: {"total_ms": entry.value, "count": entry.count, "tags": dict(entry.tags)}
                    for key, entry in buckets.items()
                }
                for name, buckets in self._series["timers"].items()
            }
            return snapshot

    def get_counter(self, name: str, tags: dict[str, str] | None = None) -> float:
        """Return the counter value, or ``0.0`` if never incremented."""
        with self._lock:
            entry = self._lookup("counters", name, tags)
            return entry.value if entry else 0.0

    def get_gauge(self, name: str, tags: dict[str, str] | None = None) -> float | None:
        """Return the gauge value, or ``None`` if never set."""
        with self._lock:
            entry = self._lookup("gauges", name, tags)
            return entry.value if entry else None

    def get_timer_total(self, name: str, tags: dict[str, str] | None = None) -> float:
        """Return the summed duration in ms, or ``0.0`` if never recorded."""
        with self._lock:
            entry = self._lookup("timers", name, tags)
            return entry.value if entry else 0.0

    def get_timer_count(self, name: str, tags: dict[str, str] | None = None) -> int:
        """Return the number of recordings, or ``0`` if never recorded."""
        with self._lock:
            entry = self._lookup("timers", name, tags)
            return entry.count if entry else 0

    def reset(self) -> None:
        """Clear all recorded metrics."""
        with self._lock:
            for kind in self._KINDS:
                self._series[kind].clear()
