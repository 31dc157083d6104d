"""Job lifecycle listener protocol and infrastructure."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from chunk_batch_framework.core.utils import call_optional
from chunk_batch_framework.repository.models import JobExecution, StepExecution

logger = logging.getLogger(__name__)

LISTENER_METHODS: tuple[str, ...] = (
    "before_job",
    "after_job",
    "before_step",
    "after_step",
    "on_step_error",
    "on_item_skipped",
    "after_chunk",
    "on_chunk_error",
    "on_retry_attempt",
)


class JobListener(Protocol):
    """Protocol defining lifecycle callbacks for job execution.

    Only ``before_job`` and ``after_job`` form the required capability set;
    every other hook is optional and the engine skips hooks a listener does
    not define. Listeners observe; they must not change engine state.
    Exceptions raised by a hook are logged and never change an execution's
    status. This protocol is NOT ``@runtime_checkable``.
    """

    def before_job(self, execution: JobExecution) -> None:
        """Called once before any step starts."""
        ...

    def after_job(self, execution: JobExecution) -> None:
        """Called exactly once after the job reached a terminal status (success or failure)."""
        ...


class StepListener(Protocol):
    """Optional step and chunk callbacks a :class:`JobListener` may also implement."""

    def before_step(self, step: StepExecution) -> None:
        """Called before a step reads its first item."""
        ...

    def after_step(self, step: StepExecution) -> None:
        """Called after a step reached a terminal status (success or failure)."""
        ...

    def on_step_error(self, step: StepExecution, error: Exception) -> None:
        """Called when a step fails, before ``after_step``."""
        ...

    def on_item_skipped(self, step: StepExecution, item: Any, reason: str) -> None:
        """Called for every item rejected by validation or filtered by the processor."""
        ...

    def after_chunk(self, step: StepExecution, size: int) -> None:
        """Called after a chunk of *size* items was written."""
        ...

    def on_chunk_error(self, step: StepExecution, size: int, error: Exception) -> None:
        """Called when a chunk write failed and the chunk was discarded."""
        ...

    def on_retry_attempt(
        self,
        step: StepExecution,
        attempt: int,
        max_attempts: int,
        delay_ms: int,
        error: Exception,
    ) -> None:
        """Called before a failed chunk write is retried."""
        ...


class NoOpListener:
    """Listener implementing every hook as a no-op.

    Subclass it to override only the hooks you need.
    """

    def before_job(self, execution: JobExecution) -> None:
        pass

    def after_job(self, execution: JobExecution) -> None:
        pass

    def before_step(self, step: StepExecution) -> None:
        pass

    def after_step(self, step: StepExecution) -> None:
        pass

    def on_step_error(self, step: StepExecution, error: Exception) -> None:
        pass

    def on_item_skipped(self, step: StepExecution, item: Any, reason: str) -> None:
        pass

    def after_chunk(self, step: StepExecution, size: int) -> None:
        pass

    def on_chunk_error(self, step: StepExecution, size: int, error: Exception) -> None:
        pass

    def on_retry_attempt(
        self,
        step: StepExecution,
        attempt: int,
        max_attempts: int,
        delay_ms: int,
        error: Exception,
    ) -> None:
        pass


class CompositeListener:
    """Broadcasts lifecycle events to multiple listeners, in registration order.

    Hooks a listener does not define are skipped. Exceptions raised by
    individual listeners are caught and logged so that one misbehaving
    listener neither breaks the job nor prevents the others from running.
    """

    def __init__(self, *listeners: Any) -> None:
        self._listeners: tuple[Any, ...] = listeners

    @property
    def listeners(self) -> tuple[Any, ...]:
        return self._listeners

    def _call_all(self, method: str, *args: Any) -> None:
        for listener in self._listeners:
            call_optional(listener, method, logger, *args)

    def before_job(self, execution: JobExecution) -> None:
        self._call_all("before_job", execution)

    def after_job(self, execution: JobExecution) -> None:
        self._call_all("after_job", execution)

    def before_step(self, step: StepExecution) -> None:
        self._call_all("before_step", step)

    def after_step(self, step: StepExecution) -> None:
        self._call_all("after_step", step)

    def on_step_error(self, step: StepExecution, error: Exception) -> None:
        self._call_all("on_step_error", step, error)

    def on_item_skipped(self, step: StepExecution, item: Any, reason: str) -> None:
        self._call_all("on_item_skipped", step, item, reason)

    def after_chunk(self, step: StepExecution, size: int) -> None:
        self._call_all("after_chunk", step, size)

    def on_chunk_error(self, step: StepExecution, size: int, error: Exception) -> None:
        self._call_all("on_chunk_error", step, size, error)

    def on_retry_attempt(
        self,
        step: StepExecution,
        attempt: int,
        max_attempts: int,
        delay_ms: int,
        error: Exception,
    ) -> None:
        self._call_all("on_retry_attempt", step, attempt, max_attempts, delay_ms, error)
