"""Built-in job listeners: logging, metrics collection and job timing."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from chunk_batch_framework.core.config.hooks import HooksConfig
from chunk_batch_framework.core.metrics.exporters import create_registry
from chunk_batch_framework.core.metrics.registry import MeterRegistry
from chunk_batch_framework.repository.models import JobExecution, StepExecution
from chunk_batch_framework.runner.hooks import CompositeListener


class LoggingListener:
    """Listener that logs job, step and chunk lifecycle events.

    Uses ``%s`` formatting for lazy evaluation. Per-item and per-chunk
    events are logged at DEBUG.

    Args:
        logger: Custom logger instance. Defaults to ``logging.getLogger("cbf.job")``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("cbf.job")

    @property
    def logger(self) -> logging.Logger:
        """Return the logger used by this listener."""
        return self._logger

    def before_job(self, execution: JobExecution) -> None:
        self._logger.info(
            "Job '%s' run_id=%s starting",
            execution.job_name,
            execution.run_id,
        )

    def after_job(self, execution: JobExecution) -> None:
        if execution.failure_cause:
            self._logger.error(
                "Job '%s' run_id=%s finished %s: %s",
                execution.job_name,
                execution.run_id,
                execution.status.value,
                execution.failure_cause,
            )
        else:
            self._logger.info(
                "Job '%s' run_id=%s finished %s",
                execution.job_name,
                execution.run_id,
                execution.status.value,
            )

    def before_step(self, step: StepExecution) -> None:
        if step.restart_offset:
            self._logger.info(
                "Step '%s' starting after %d previously committed record(s)",
                step.step_name,
                step.restart_offset,
            )
        else:
            self._logger.info("Step '%s' starting", step.step_name)

    def after_step(self, step: StepExecution) -> None:
        self._logger.info(
            "Step '%s' %s: read=%d written=%d skipped=%d commits=%d",
            step.step_name,
            step.status.value,
            step.read_count,
            step.write_count,
            step.skip_count,
            step.commit_count,
        )

    def on_step_error(self, step: StepExecution, error: Exception) -> None:
        self._logger.error(
            "Step '%s' failed, %d item(s) discarded: %s",
            step.step_name,
            step.discard_count,
            error,
        )

    def on_item_skipped(self, step: StepExecution, item: Any, reason: str) -> None:
        self._logger.debug("Step '%s' skipped %r: %s", step.step_name, item, reason)

    def after_chunk(self, step: StepExecution, size: int) -> None:
        self._logger.debug(
            "Step '%s' committed chunk #%d (%d item(s))",
            step.step_name,
            step.commit_count,
            size,
        )

    def on_chunk_error(self, step: StepExecution, size: int, error: Exception) -> None:
        self._logger.error(
            "Step '%s' rolled back chunk of %d item(s): %s",
            step.step_name,
            size,
            error,
        )

    def on_retry_attempt(
        self,
        step: StepExecution,
        attempt: int,
        max_attempts: int,
        delay_ms: int,
        error: Exception,
    ) -> None:
        self._logger.warning(
            "Step '%s' chunk write retry %d/%d after %dms: %s",
            step.step_name,
            attempt,
            max_attempts,
            delay_ms,
            error,
        )


class MetricsListener:
    """Listener that records item counts, commits and durations in a registry.

    Args:
        registry: Meter registry receiving the metrics.
        clock: Injectable monotonic clock for testing.
            Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        registry: MeterRegistry,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._registry = registry
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._job_starts: dict[str, float] = {}
        self._job_names: dict[str, str] = {}

    @property
    def registry(self) -> MeterRegistry:
        """Return the meter registry."""
        return self._registry

    def before_job(self, execution: JobExecution) -> None:
        with self._lock:
            self._job_starts[execution.execution_id] = self._clock()
            self._job_names[execution.execution_id] = execution.job_name

    def after_job(self, execution: JobExecution) -> None:
        with self._lock:
            start = self._job_starts.pop(execution.execution_id, None)
            self._job_names.pop(execution.execution_id, None)
        if start is None:
            return
        self._registry.timer(
            "cbf_job_duration_ms",
            (self._clock() - start) * 1000,
            tags={"job": execution.job_name, "status": execution.status.value},
        )

    def after_step(self, step: StepExecution) -> None:
        tags = self._step_tags(step)
        self._registry.counter("cbf_items_read", float(step.read_count), tags=tags)
        self._registry.counter("cbf_items_written", float(step.write_count), tags=tags)
        self._registry.counter("cbf_items_skipped", float(step.skip_count), tags=tags)
        if step.duration_ms is not None:
            self._registry.timer("cbf_step_duration_ms", float(step.duration_ms), tags=tags)

    def on_step_error(self, step: StepExecution, error: Exception) -> None:
        self._registry.counter("cbf_step_failures", tags=self._step_tags(step))

    def after_chunk(self, step: StepExecution, size: int) -> None:
        self._registry.counter("cbf_chunks_committed", tags=self._step_tags(step))

    def on_retry_attempt(
        self,
        step: StepExecution,
        attempt: int,
        max_attempts: int,
        delay_ms: int,
        error: Exception,
    ) -> None:
        self._registry.counter("cbf_chunk_retries", tags=self._step_tags(step))

    def _step_tags(self, step: StepExecution) -> dict[str, str]:
        with self._lock:
            job_name = self._job_names.get(step.job_execution_id, "")
        return {"job": job_name, "step": step.step_name}


class TimingListener:
    """Logs when a job starts and how long it took.

    Args:
        clock: Injectable monotonic clock for testing.
            Defaults to ``time.monotonic``.
        logger: Custom logger instance. Defaults to ``logging.getLogger("cbf.timing")``.
    """

    def __init__(
        self,
        clock: Callable[[], float] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._clock = clock or time.monotonic
        self._logger = logger or logging.getLogger("cbf.timing")
        self._lock = threading.Lock()
        self._starts: dict[str, float] = {}
        self.durations_ms: dict[str, int] = {}
        """Elapsed wall time per execution id, filled in by ``after_job``."""

    def before_job(self, execution: JobExecution) -> None:
        with self._lock:
            self._starts[execution.execution_id] = self._clock()
        self._logger.info("Job '%s' run_id=%s started", execution.job_name, execution.run_id)

    def after_job(self, execution: JobExecution) -> None:
        with self._lock:
            start = self._starts.pop(execution.execution_id, None)
            if start is None:
                return
            elapsed_ms = int((self._clock() - start) * 1000)
            self.durations_ms[execution.execution_id] = elapsed_ms
        self._logger.info(
            "Job '%s' run_id=%s finished in %dms",
            execution.job_name,
            execution.run_id,
            elapsed_ms,
        )


def build_listener(config: HooksConfig, registry: MeterRegistry | None = None) -> CompositeListener:
    """Compose the built-in listeners enabled by *config*.

    Args:
        config: Listener configuration from the job file.
        registry: Registry for the metrics listener. Built from
            ``config.metrics`` when omitted.
    """
    listeners: list[Any] = [LoggingListener()]
    if config.timing:
        listeners.append(TimingListener())
    if config.metrics is not None and config.metrics.enabled:
        listeners.append(MetricsListener(registry or create_registry(config.metrics)))
    return CompositeListener(*listeners)
