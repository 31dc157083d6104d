"""Execution repository and job lifecycle exceptions."""

from __future__ import annotations

from chunk_batch_framework.core.item.exceptions import BatchError


class RepositoryError(BatchError):
    """Base exception for execution repository errors."""

    pass


class DuplicateRunError(RepositoryError):
    """An execution already exists for this job name and run id.

    Raised before any listener or step runs, so a completed run is never
    executed twice.
    """

    def __init__(self, job_name: str, run_id: str, existing_status: str | None = None) -> None:
        self.job_name = job_name
        self.run_id = run_id
        self.existing_status = existing_status
        detail = f" (existing execution is {existing_status})" if existing_status else ""
        super().__init__(f"Job '{job_name}' already has an execution for run_id={run_id!r}{detail}")


class JobExecutionNotFoundError(RepositoryError):
    """No execution matches the requested identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"No job execution found for {identifier}")


class InvalidTransitionError(RepositoryError, ValueError):
    """Raised when an illegal status transition is attempted (e.g. COMPLETED -> STARTED)."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid status transition: {current} -> {target}")


class JobRestartError(RepositoryError):
    """A previous execution cannot be restarted (it completed or is still running)."""

    def __init__(self, job_name: str, run_id: str, status: str) -> None:
        self.job_name = job_name
        self.run_id = run_id
        self.status = status
        super().__init__(f"Cannot restart job '{job_name}' run_id={run_id!r} in status {status}")
