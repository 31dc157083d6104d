"""Execution repository protocol.

The repository is the single source of truth for job and step execution
state. One instance is created at process start, shared by every launcher,
and closed explicitly on shutdown.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chunk_batch_framework.repository.models import BatchStatus, JobExecution, StepExecution


@runtime_checkable
class ExecutionRepository(Protocol):
    """Persistence layer for job and step executions.

    Implementations must be safe to share between threads and must
    guarantee that no two executions claim the same ``(job_name, run_id)``.
    Every method returns snapshots: mutating a returned object never
    changes stored state.
    """

    def create_execution(
        self,
        job_name: str,
        run_id: str,
        restarted_from: str | None = None,
    ) -> JobExecution:
        """Create a STARTING execution.

        Raises:
            DuplicateRunError: If ``(job_name, run_id)`` already exists.
        """
        ...

    def update_status(
        self,
        execution_id: str,
        status: BatchStatus,
        cause: str | None = None,
    ) -> JobExecution:
        """Move an execution to *status*, recording *cause* when given.

        Sets ``start_time`` on STARTED and ``end_time`` on terminal states.

        Raises:
            JobExecutionNotFoundError: If *execution_id* is unknown.
            InvalidTransitionError: If the transition is not allowed.
        """
        ...

    def get_execution(self, job_name: str, run_id: str) -> JobExecution | None:
        """Return the execution for ``(job_name, run_id)``, or ``None``."""
        ...

    def get_execution_by_id(self, execution_id: str) -> JobExecution | None:
        """Return the execution with *execution_id*, or ``None``."""
        ...

    def list_executions(self, job_name: str) -> list[JobExecution]:
        """Return every execution of *job_name*, oldest first."""
        ...

    def get_last_execution(self, job_name: str) -> JobExecution | None:
        """Return the most recently created execution of *job_name*, or ``None``."""
        ...

    def add_step_execution(self, execution_id: str, step: StepExecution) -> StepExecution:
        """Attach a new step execution to a job execution.

        Raises:
            JobExecutionNotFoundError: If *execution_id* is unknown.
        """
        ...

    def update_step_execution(self, step: StepExecution) -> None:
        """Persist the counters, status and failure cause of *step*."""
        ...

    def close(self) -> None:
        """Release storage resources."""
        ...
