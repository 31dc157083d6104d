"""Item-level exceptions raised inside a chunk-oriented step.

Validation rejections are *not* exceptions: processors report them as
:class:`~chunk_batch_framework.core.item.base.SkippedItem` results so they
never escape the processor boundary.
"""

from __future__ import annotations

from typing import Any


class BatchError(Exception):
    """Base exception for all engine errors."""

    pass


class StepError(BatchError):
    """Base class for errors that are fatal to the containing step."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class SourceError(StepError):
    """The record source failed to produce the next record."""

    def __init__(self, cause: Exception, source: str | None = None) -> None:
        self.source = source
        label = f" '{source}'" if source else ""
        super().__init__(f"Record source{label} failed: {cause}", cause)


class ProcessingError(StepError):
    """The item processor failed to transform an item."""

    def __init__(self, item: Any, cause: Exception | None = None, message: str | None = None) -> None:
        self.item = item
        if message is None:
            message = f"Processing failed for item {item!r}: {cause}"
        super().__init__(message, cause)


class SinkError(StepError):
    """The record sink failed to write a chunk. The chunk was not persisted."""

    def __init__(self, chunk_size: int, cause: Exception | None = None, message: str | None = None) -> None:
        self.chunk_size = chunk_size
        if message is None:
            message = f"Writing chunk of {chunk_size} item(s) failed: {cause}"
        super().__init__(message, cause)
