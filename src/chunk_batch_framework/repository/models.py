"""Job and step execution records and the status state machine.

Valid transition graph (jobs and steps)::

    STARTING -> STARTED | FAILED
    STARTED  -> COMPLETED | FAILED | STOPPED
    COMPLETED, FAILED, STOPPED -> (terminal)

A terminal execution is never reopened; restarting a failed job creates a
new execution under a new run id.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from chunk_batch_framework.repository.exceptions import InvalidTransitionError


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class BatchStatus(str, Enum):
    """Lifecycle status shared by job and step executions."""

    STARTING = "STARTING"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    STOPPED = "STOPPED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.STOPPED})

VALID_TRANSITIONS: dict[BatchStatus, frozenset[BatchStatus]] = {
    BatchStatus.STARTING: frozenset({BatchStatus.STARTED, BatchStatus.FAILED}),
    BatchStatus.STARTED: frozenset({BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.STOPPED}),
    BatchStatus.COMPLETED: frozenset(),
    BatchStatus.FAILED: frozenset(),
    BatchStatus.STOPPED: frozenset(),
}


def validate_transition(current: BatchStatus, target: BatchStatus) -> None:
    """Raise :class:`InvalidTransitionError` if *current -> target* is illegal.

    Example:
        >>> validate_transition(BatchStatus.STARTED, BatchStatus.COMPLETED)
        >>> validate_transition(BatchStatus.COMPLETED, BatchStatus.STARTED)
        Traceback (most recent call last):
        ...
        InvalidTransitionError: Invalid status transition: COMPLETED -> STARTED
    """
    if target not in VALID_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current.value, target.value)


def describe_failure(error: BaseException) -> str:
    """Render an exception as the persisted failure cause."""
    return f"{type(error).__name__}: {error}"


@dataclass
class StepExecution:
    """One step's contribution to a job execution.

    Counters satisfy ``write_count + skip_count + discard_count == read_count``
    once the step is finalized. ``discard_count`` is the number of items that
    were read but lost because the step stopped fatally (the discarded chunk
    plus the item that failed processing).
    """

    step_name: str
    job_execution_id: str = ""
    step_execution_id: str = field(default_factory=new_id)
    status: BatchStatus = BatchStatus.STARTING
    read_count: int = 0
    write_count: int = 0
    skip_count: int = 0
    discard_count: int = 0
    commit_count: int = 0
    rollback_count: int = 0
    restart_offset: int = 0
    """Records skipped at start because a prior run already committed them."""
    commit_position: int = 0
    """Absolute source position (``restart_offset`` included) of the last committed read."""
    start_time: datetime | None = None
    end_time: datetime | None = None
    failure_cause: str | None = None
    failure: BaseException | None = field(default=None, repr=False, compare=False)
    """The live exception, available in-process only; not persisted."""

    def transition_to(self, status: BatchStatus) -> None:
        validate_transition(self.status, status)
        self.status = status

    def fail(self, error: BaseException) -> None:
        """Finalize the step as FAILED with *error* as its cause."""
        self.transition_to(BatchStatus.FAILED)
        self.failure = error
        self.failure_cause = describe_failure(error)

    @property
    def duration_ms(self) -> int | None:
        if self.start_time is None or self.end_time is None:
            return None
        return int((self.end_time - self.start_time).total_seconds() * 1000)

    def copy(self) -> StepExecution:
        return replace(self)


@dataclass
class JobExecution:
    """One run of a named job, identified by ``(job_name, run_id)``."""

    job_name: str
    run_id: str
    execution_id: str = field(default_factory=new_id)
    status: BatchStatus = BatchStatus.STARTING
    create_time: datetime = field(default_factory=utcnow)
    start_time: datetime | None = None
    end_time: datetime | None = None
    failure_cause: str | None = None
    restarted_from: str | None = None
    """Run id of the failed execution this run resumes, if any."""
    step_executions: list[StepExecution] = field(default_factory=list)

    @property
    def is_running(self) -> bool:
        return not self.status.is_terminal

    @property
    def duration_ms(self) -> int | None:
        if self.start_time is None or self.end_time is None:
            return None
        return int((self.end_time - self.start_time).total_seconds() * 1000)

    def get_step(self, step_name: str) -> StepExecution | None:
        """Return the step execution named *step_name*, or ``None``."""
        for step in self.step_executions:
            if step.step_name == step_name:
                return step
        return None

    def copy(self) -> JobExecution:
        return replace(self, step_executions=[s.copy() for s in self.step_executions])
