"""In-memory source and sink, mainly for tests and embedding."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from typing import TypeVar

from chunk_batch_framework.core.item.base import RecordSink, RecordSource

T = TypeVar("T")


class IterableSource(RecordSource[T]):
    """Reads records from any iterable, one at a time.

    ``None`` elements are not allowed since ``None`` marks exhaustion.
    """

    def __init__(self, items: Iterable[T], name: str | None = None) -> None:
        self._iterator = iter(items)
        self._name = name or type(self).__name__
        self._exhausted = False

    @property
    def name(self) -> str:
        return self._name

    def read(self) -> T | None:
        if self._exhausted:
            raise RuntimeError(f"Source '{self._name}' was read after exhaustion")
        try:
            item = next(self._iterator)
        except StopIteration:
            self._exhausted = True
            return None
        if item is None:
            raise ValueError(f"Source '{self._name}' produced a None record")
        return item


class ListSink(RecordSink[T]):
    """Collects written chunks in memory.

    Each ``write`` appends the whole chunk at once, so a failed write leaves
    :attr:`items` untouched. :attr:`batches` keeps one entry per write.
    """

    def __init__(self, name: str | None = None) -> None:
        self._name = name or type(self).__name__
        self._lock = threading.Lock()
        self.batches: list[list[T]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def items(self) -> list[T]:
        with self._lock:
            return [item for batch in self.batches for item in batch]

    @property
    def batch_sizes(self) -> list[int]:
        with self._lock:
            return [len(batch) for batch in self.batches]

    def write(self, items: Sequence[T]) -> None:
        batch = list(items)
        with self._lock:
            self.batches.append(batch)
