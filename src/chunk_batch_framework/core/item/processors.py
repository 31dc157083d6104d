"""Reusable item processors."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from chunk_batch_framework.core.item.base import I, ItemProcessor, O, ProcessResult, SkippedItem
from chunk_batch_framework.core.item.exceptions import ProcessingError
from chunk_batch_framework.core.item.validation import Validator

T = TypeVar("T")


class PassThroughItemProcessor(ItemProcessor[T, T]):
    """Returns every item unchanged. Used when a step declares no processor."""

    def process(self, item: T) -> ProcessResult[T]:
        return item


class FunctionItemProcessor(ItemProcessor[I, O]):
    """Wraps a plain function as a processor.

    The function may return an output item, ``None`` to filter the item, or
    a :class:`SkippedItem`. Any other exception is wrapped in
    :class:`ProcessingError`.
    """

    def __init__(self, func: Callable[[I], Any]) -> None:
        self._func = func

    def process(self, item: I) -> ProcessResult[O]:
        try:
            return self._func(item)
        except ProcessingError:
            raise
        except Exception as exc:
            raise ProcessingError(item, exc) from exc


class ValidatingItemProcessor(ItemProcessor[I, O]):
    """Validates each item, then applies a deterministic transform.

    Rejected items are returned as :class:`SkippedItem` with the validator's
    reason. Accepted items are passed to *transform*; with no transform the
    item itself is returned.

    Args:
        validator: Validator applied before the transform.
        transform: Pure function of the input item.
    """

    def __init__(
        self,
        validator: Validator[I],
        transform: Callable[[I], O] | None = None,
    ) -> None:
        self._validator = validator
        self._transform = transform

    @property
    def validator(self) -> Validator[I]:
        return self._validator

    def process(self, item: I) -> ProcessResult[O]:
        outcome = self._validator.validate(item)
        if not outcome.accepted:
            return SkippedItem(reason=outcome.reason or "rejected")
        if self._transform is None:
            return item  # type: ignore[return-value]
        try:
            return self._transform(item)
        except ProcessingError:
            raise
        except Exception as exc:
            raise ProcessingError(item, exc) from exc


class CompositeItemProcessor(ItemProcessor[Any, Any]):
    """Chains processors, feeding each output into the next.

    The chain stops at the first skip or filter and returns that result.
    """

    def __init__(self, *processors: ItemProcessor[Any, Any]) -> None:
        if not processors:
            raise ValueError("CompositeItemProcessor requires at least one processor")
        self._processors: tuple[ItemProcessor[Any, Any], ...] = processors

    def process(self, item: Any) -> ProcessResult[Any]:
        current: Any = item
        for processor in self._processors:
            current = processor.process(current)
            if current is None or isinstance(current, SkippedItem):
                return current
        return current
