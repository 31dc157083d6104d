"""Job launcher: runs jobs against an execution repository."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from chunk_batch_framework.core.utils import call_optional
from chunk_batch_framework.repository.base import ExecutionRepository
from chunk_batch_framework.repository.exceptions import JobExecutionNotFoundError, JobRestartError
from chunk_batch_framework.repository.models import (
    BatchStatus,
    JobExecution,
    StepExecution,
    describe_failure,
    utcnow,
)
from chunk_batch_framework.runner.chunk_executor import ChunkExecutor
from chunk_batch_framework.runner.hooks import CompositeListener
from chunk_batch_framework.runner.job import Job

logger = logging.getLogger(__name__)


class _StepProgressRecorder:
    """Persists step counters after every committed or failed chunk."""

    def __init__(self, repository: ExecutionRepository) -> None:
        self._repository = repository

    def after_chunk(self, step: StepExecution, size: int) -> None:
        self._repository.update_step_execution(step)

    def on_chunk_error(self, step: StepExecution, size: int, error: Exception) -> None:
        self._repository.update_step_execution(step)


class JobLauncher:
    """Launches jobs, one thread of control per job execution.

    Steps run sequentially in declaration order. The launcher owns the job
    lifecycle: it claims the run id, drives the status state machine,
    notifies the listener and always leaves the execution in a terminal
    status (COMPLETED, FAILED or STOPPED) before returning.

    One launcher may be shared by several threads, each launching a
    different run.

    Args:
        repository: Execution repository shared by all runs.
        listener: Lifecycle listener (optional). Hooks it does not define
            are skipped; hook errors are logged and ignored.
        sleep_func: Injectable sleep for chunk write retry delays (testing).
    """

    def __init__(
        self,
        repository: ExecutionRepository,
        listener: Any = None,
        sleep_func: Callable[[float], None] | None = None,
    ) -> None:
        self._repository = repository
        self._listener = listener
        self._executor = ChunkExecutor(
            listener=CompositeListener(_StepProgressRecorder(repository), *([listener] if listener is not None else [])),
            sleep_func=sleep_func,
        )
        self._stop_lock = threading.Lock()
        self._stop_events: dict[tuple[str, str], threading.Event] = {}

    @property
    def repository(self) -> ExecutionRepository:
        return self._repository

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def launch(self, job: Job, run_id: str) -> JobExecution:
        """Run *job* under *run_id*.

        Returns:
            The finalized execution snapshot.

        Raises:
            DuplicateRunError: If *job* already has an execution for
                *run_id*. Raised before any listener or step runs.
        """
        execution = self._repository.create_execution(job.name, run_id)
        logger.info("Launching job '%s' run_id=%s (execution %s)", job.name, run_id, execution.execution_id)
        return self._run(job, execution, {})

    def restart(self, job: Job, previous_run_id: str, run_id: str) -> JobExecution:
        """Resume a FAILED or STOPPED run of *job* under a new *run_id*.

        Steps that completed in the previous run (or in any run it was
        itself restarted from) are skipped. The interrupted step re-reads
        its source from the start and skips the records that were already
        committed, so the source must be deterministic.

        Raises:
            JobExecutionNotFoundError: If *previous_run_id* has no execution.
            JobRestartError: If the previous execution completed or is still running.
            DuplicateRunError: If *run_id* is already taken.
        """
        previous = self._repository.get_execution(job.name, previous_run_id)
        if previous is None:
            raise JobExecutionNotFoundError(f"job_name={job.name!r} run_id={previous_run_id!r}")
        if previous.status is BatchStatus.COMPLETED or previous.is_running:
            raise JobRestartError(job.name, previous_run_id, previous.status.value)

        resume_points = self._resume_points(previous)
        execution = self._repository.create_execution(job.name, run_id, restarted_from=previous_run_id)
        logger.info(
            "Restarting job '%s' run_id=%s from run_id=%s (execution %s)",
            job.name,
            run_id,
            previous_run_id,
            execution.execution_id,
        )
        return self._run(job, execution, resume_points)

    def stop(self, job_name: str, run_id: str) -> bool:
        """Request a cooperative stop of a running execution.

        The running step notices the request after its next chunk commit,
        or after a skipped item when no chunk is pending, and the job ends
        STOPPED. A step blocked inside a read, process or write call is not
        interrupted. Returns ``False`` if no such execution is running here.
        """
        with self._stop_lock:
            event = self._stop_events.get((job_name, run_id))
        if event is None:
            return False
        logger.info("Stop requested for job '%s' run_id=%s", job_name, run_id)
        event.set()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(self, job: Job, execution: JobExecution, resume_points: dict[str, StepExecution]) -> JobExecution:
        key = (job.name, execution.run_id)
        stop_event = threading.Event()
        with self._stop_lock:
            self._stop_events[key] = stop_event

        status = BatchStatus.COMPLETED
        cause: str | None = None
        results: list[StepExecution] = []
        try:
            self._notify("before_job", execution.copy())
            self._repository.update_status(execution.execution_id, BatchStatus.STARTED)

            for step in job.steps:
                if stop_event.is_set():
                    status = BatchStatus.STOPPED
                    break

                prior = resume_points.get(step.name)
                if prior is not None and prior.status is BatchStatus.COMPLETED:
                    logger.info("Skipping step '%s': completed in a previous run", step.name)
                    continue

                step_execution = self._repository.add_step_execution(
                    execution.execution_id,
                    StepExecution(step_name=step.name),
                )
                result = self._executor.run_step(
                    step.source,
                    step.processor,
                    step.sink,
                    step.commit_interval,
                    step_execution=step_execution,
                    retry=step.retry,
                    should_stop=stop_event.is_set,
                    start_after=prior.commit_position if prior is not None else 0,
                )
                results.append(result)
                self._repository.update_step_execution(result)

                if result.status is BatchStatus.FAILED:
                    status = BatchStatus.FAILED
                    cause = f"Step '{step.name}' failed: {result.failure_cause}"
                    break
                if result.status is BatchStatus.STOPPED:
                    status = BatchStatus.STOPPED
                    break

        except Exception as exc:
            logger.exception("Job '%s' run_id=%s aborted", job.name, execution.run_id)
            status = BatchStatus.FAILED
            cause = describe_failure(exc)

        finally:
            with self._stop_lock:
                self._stop_events.pop(key, None)

        final = replace(
            execution,
            status=status,
            failure_cause=cause,
            end_time=utcnow(),
            step_executions=results,
        )
        try:
            final = self._repository.update_status(execution.execution_id, status, cause)
        except Exception:
            logger.exception(
                "Could not record status %s for job '%s' run_id=%s", status.value, job.name, execution.run_id
            )
        finally:
            logger.info("Job '%s' run_id=%s finished with status %s", job.name, execution.run_id, final.status.value)
            self._notify("after_job", final.copy())
        return final

    def _resume_points(self, previous: JobExecution) -> dict[str, StepExecution]:
        """Latest step execution per step name across the restart chain."""
        points: dict[str, StepExecution] = {}
        execution: JobExecution | None = previous
        while execution is not None:
            for step in execution.step_executions:
                points.setdefault(step.step_name, step)
            if execution.restarted_from is None:
                break
            execution = self._repository.get_execution(execution.job_name, execution.restarted_from)
        return points

    def _notify(self, method: str, *args: Any) -> None:
        if self._listener is not None:
            call_optional(self._listener, method, logger, *args)
