"""Thread-safe in-memory execution repository."""

from __future__ import annotations

import logging
import threading

from chunk_batch_framework.repository.exceptions import DuplicateRunError, JobExecutionNotFoundError
from chunk_batch_framework.repository.models import (
    BatchStatus,
    JobExecution,
    StepExecution,
    utcnow,
    validate_transition,
)

logger = logging.getLogger(__name__)


class InMemoryExecutionRepository:
    """Execution repository held in process memory.

    Suitable for tests and single-process runs where execution history does
    not need to survive a restart. A single lock serializes all access, so
    the run-id uniqueness check and the insert are atomic.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._executions: dict[str, JobExecution] = {}
        self._by_run: dict[tuple[str, str], str] = {}

    def create_execution(
        self,
        job_name: str,
        run_id: str,
        restarted_from: str | None = None,
    ) -> JobExecution:
        with self._lock:
            existing_id = self._by_run.get((job_name, run_id))
            if existing_id is not None:
                raise DuplicateRunError(job_name, run_id, self._executions[existing_id].status.value)
            execution = JobExecution(job_name=job_name, run_id=run_id, restarted_from=restarted_from)
            self._executions[execution.execution_id] = execution
            self._by_run[(job_name, run_id)] = execution.execution_id
            logger.debug("Created execution %s for job '%s' run_id=%s", execution.execution_id, job_name, run_id)
            return execution.copy()

    def update_status(
        self,
        execution_id: str,
        status: BatchStatus,
        cause: str | None = None,
    ) -> JobExecution:
        with self._lock:
            execution = self._require(execution_id)
            validate_transition(execution.status, status)
            execution.status = status
            if status is BatchStatus.STARTED:
                execution.start_time = utcnow()
            if status.is_terminal:
                execution.end_time = utcnow()
            if cause is not None:
                execution.failure_cause = cause
            return execution.copy()

    def get_execution(self, job_name: str, run_id: str) -> JobExecution | None:
        with self._lock:
            execution_id = self._by_run.get((job_name, run_id))
            if execution_id is None:
                return None
            return self._executions[execution_id].copy()

    def get_execution_by_id(self, execution_id: str) -> JobExecution | None:
        with self._lock:
            execution = self._executions.get(execution_id)
            return execution.copy() if execution is not None else None

    def list_executions(self, job_name: str) -> list[JobExecution]:
        with self._lock:
            # dicts keep insertion order, which is creation order
            return [e.copy() for e in self._executions.values() if e.job_name == job_name]

    def get_last_execution(self, job_name: str) -> JobExecution | None:
        executions = self.list_executions(job_name)
        return executions[-1] if executions else None

    def add_step_execution(self, execution_id: str, step: StepExecution) -> StepExecution:
        with self._lock:
            execution = self._require(execution_id)
            step.job_execution_id = execution_id
            execution.step_executions.append(step.copy())
            return step

    def update_step_execution(self, step: StepExecution) -> None:
        with self._lock:
            execution = self._require(step.job_execution_id)
            for index, stored in enumerate(execution.step_executions):
                if stored.step_execution_id == step.step_execution_id:
                    execution.step_executions[index] = step.copy()
                    return
            raise JobExecutionNotFoundError(f"step_execution_id={step.step_execution_id!r}")

    def close(self) -> None:
        pass

    def _require(self, execution_id: str) -> JobExecution:
        execution = self._executions.get(execution_id)
        if execution is None:
            raise JobExecutionNotFoundError(f"execution_id={execution_id!r}")
        return execution
