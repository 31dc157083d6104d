"""Core item contracts: record source, item processor and record sink."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

I = TypeVar("I")  # noqa: E741
O = TypeVar("O")  # noqa: E741


@dataclass(frozen=True)
class SkippedItem:
    """Result returned by a processor for an item rejected by validation.

    The executor counts it as a skip; it is never treated as an error.
    """

    reason: str


ProcessResult = Union[O, SkippedItem, None]
"""What :meth:`ItemProcessor.process` returns.

An output item, a :class:`SkippedItem` carrying a rejection reason, or
``None`` when the processor filtered the item.
"""


class RecordSource(ABC, Generic[I]):
    """Lazy, finite, non-restartable sequence of input records.

    Every source must:
    1. Return the next record from :meth:`read`
    2. Return ``None`` exactly once to signal exhaustion

    The executor never calls :meth:`read` again after it returned ``None``.
    """

    @property
    def name(self) -> str:
        """Human-readable source name for logging."""
        return type(self).__name__

    @abstractmethod
    def read(self) -> I | None:
        """Return the next record, or ``None`` when the source is exhausted.

        Raises:
            Exception: Any exception is fatal to the step and is reported
                as a :class:`~chunk_batch_framework.core.item.exceptions.SourceError`.
        """
        ...


class ItemProcessor(ABC, Generic[I, O]):
    """Transforms one input item into zero or one output item.

    Implementations must not keep cross-item mutable state: an item may be
    processed again when a failed step is restarted.
    """

    @abstractmethod
    def process(self, item: I) -> ProcessResult[O]:
        """Process a single item.

        Returns:
            The output item, a :class:`SkippedItem` when the item failed
            validation, or ``None`` to filter the item out.

        Raises:
            ProcessingError: On a genuine transformation failure.
        """
        ...


class RecordSink(ABC, Generic[O]):
    """Durably persists a chunk of output items as one atomic operation."""

    @property
    def name(self) -> str:
        """Human-readable sink name for logging."""
        return type(self).__name__

    @abstractmethod
    def write(self, items: Sequence[O]) -> None:
        """Write *items* atomically: either all of them persist or none do.

        Only called with non-empty sequences.

        Raises:
            Exception: Any exception fails the step; the chunk is discarded.
        """
        ...
