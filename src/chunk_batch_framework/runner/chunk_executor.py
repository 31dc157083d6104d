"""Chunk-oriented step execution: the read -> process -> write loop."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from chunk_batch_framework.core.config.retry import RetryConfig
from chunk_batch_framework.core.item.base import ItemProcessor, RecordSink, RecordSource, SkippedItem
from chunk_batch_framework.core.item.exceptions import ProcessingError, SinkError, SourceError, StepError
from chunk_batch_framework.core.item.processors import PassThroughItemProcessor
from chunk_batch_framework.core.item.protocols import Resource
from chunk_batch_framework.core.resilience.retry import RetryExecutor
from chunk_batch_framework.core.utils import call_optional, safe_call
from chunk_batch_framework.repository.models import BatchStatus, StepExecution, utcnow

logger = logging.getLogger(__name__)


class _StopRequested(Exception):
    """Internal signal: a stop was requested at a chunk boundary."""


class ChunkExecutor:
    """Runs one chunk-oriented step.

    Items are pulled one at a time from the source, passed through the
    processor and accumulated into a chunk. A full chunk (``commit_interval``
    items) is handed to the sink in a single atomic ``write`` call. The chunk
    is the only transaction boundary: when a write fails the whole chunk is
    discarded and the step fails; chunks committed earlier stay committed.

    Validation rejections and filtered items are skips. Any error from the
    source, processor or sink is fatal to the step and is recorded on the
    returned :class:`StepExecution`; ``run_step`` itself does not raise for
    those errors.

    Args:
        listener: Receives step, skip and chunk callbacks. Hooks it does not
            define are skipped.
        sleep_func: Injectable sleep for retry delays (testing).
    """

    def __init__(
        self,
        listener: Any = None,
        sleep_func: Callable[[float], None] | None = None,
    ) -> None:
        self._listener = listener
        self._sleep_func = sleep_func

    def run_step(
        self,
        source: RecordSource[Any],
        processor: ItemProcessor[Any, Any] | None,
        sink: RecordSink[Any],
        commit_interval: int,
        *,
        step_execution: StepExecution | None = None,
        step_name: str = "step",
        retry: RetryConfig | None = None,
        should_stop: Callable[[], bool] | None = None,
        start_after: int = 0,
    ) -> StepExecution:
        """Execute the step until the source is exhausted or a fatal error occurs.

        Args:
            source: Record source; read until it returns ``None``.
            processor: Item processor; ``None`` passes items through.
            sink: Record sink receiving each chunk atomically.
            commit_interval: Maximum chunk size (at least 1).
            step_execution: Record to update; a new one named *step_name* is
                created when omitted.
            step_name: Name for a newly created step execution.
            retry: Optional retry policy for failed chunk writes.
            should_stop: Polled after every chunk commit, and after a skipped
                item while no chunk is pending; returning ``True`` ends the
                step as STOPPED.
            start_after: Number of leading records to read and discard
                because a previous run already committed them.

        Returns:
            The finalized step execution (COMPLETED, FAILED or STOPPED).
        """
        if commit_interval < 1:
            raise ValueError("commit_interval must be at least 1")

        step = step_execution or StepExecution(step_name=step_name)
        processor = processor or PassThroughItemProcessor()
        step.restart_offset = start_after
        step.commit_position = start_after
        step.start_time = utcnow()
        step.transition_to(BatchStatus.STARTED)
        self._notify("before_step", step.copy())

        opened: list[Resource] = []
        chunk: list[Any] = []
        try:
            self._open(source, opened)
            self._open(sink, opened)
            self._fast_forward(source, start_after)

            while True:
                item = self._read(source)
                if item is None:
                    break
                step.read_count += 1

                result = self._process(processor, item)
                if result is None or isinstance(result, SkippedItem):
                    step.skip_count += 1
                    reason = result.reason if isinstance(result, SkippedItem) else "filtered"
                    logger.debug("Step '%s' skipped item %r: %s", step.step_name, item, reason)
                    self._notify("on_item_skipped", step.copy(), item, reason)
                    if not chunk and should_stop is not None and should_stop():
                        step.commit_position = step.restart_offset + step.read_count
                        raise _StopRequested()
                    continue

                chunk.append(result)
                if len(chunk) >= commit_interval:
                    self._write_chunk(step, sink, chunk, retry)
                    chunk = []
                    if should_stop is not None and should_stop():
                        raise _StopRequested()

            if chunk:
                self._write_chunk(step, sink, chunk, retry)
                chunk = []
            step.transition_to(BatchStatus.COMPLETED)

        except _StopRequested:
            logger.info("Step '%s' stopped at chunk boundary after %d commit(s)", step.step_name, step.commit_count)
            step.transition_to(BatchStatus.STOPPED)

        except Exception as exc:
            step.discard_count = step.read_count - step.write_count - step.skip_count
            step.fail(exc)
            logger.error(
                "Step '%s' failed after %d read(s), %d write(s): %s",
                step.step_name,
                step.read_count,
                step.write_count,
                exc,
            )
            self._notify("on_step_error", step.copy(), exc)

        finally:
            step.end_time = utcnow()
            for resource in reversed(opened):
                safe_call(
                    resource.close,
                    logger,
                    "Closing %s for step '%s' raised an exception",
                    type(resource).__name__,
                    step.step_name,
                )

        self._notify("after_step", step.copy())
        return step

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _open(component: object, opened: list[Resource]) -> None:
        if isinstance(component, Resource):
            component.open()
            opened.append(component)

    def _fast_forward(self, source: RecordSource[Any], count: int) -> None:
        for position in range(count):
            if self._read(source) is None:
                raise SourceError(
                    ValueError(f"source exhausted after {position} record(s) while skipping {count} committed record(s)"),
                    getattr(source, "name", None),
                )

    @staticmethod
    def _read(source: RecordSource[Any]) -> Any:
        try:
            return source.read()
        except SourceError:
            raise
        except Exception as exc:
            raise SourceError(exc, getattr(source, "name", None)) from exc

    @staticmethod
    def _process(processor: ItemProcessor[Any, Any], item: Any) -> Any:
        try:
            return processor.process(item)
        except ProcessingError:
            raise
        except Exception as exc:
            raise ProcessingError(item, exc) from exc

    def _write_chunk(
        self,
        step: StepExecution,
        sink: RecordSink[Any],
        chunk: list[Any],
        retry: RetryConfig | None,
    ) -> None:
        """Write *chunk* atomically and account for it, or raise ``SinkError``."""
        size = len(chunk)
        items = tuple(chunk)

        def write() -> None:
            try:
                sink.write(items)
            except SinkError:
                raise
            except Exception as exc:
                raise SinkError(size, exc) from exc

        try:
            if retry is None:
                write()
            else:
                executor = RetryExecutor(retry, jitter_factor=0.0, sleep_func=self._sleep_func)

                def on_retry(attempt: int, error: Exception, delay: float) -> None:
                    logger.warning(
                        "Step '%s' chunk write attempt %d/%d failed, retrying in %.3fs: %s",
                        step.step_name,
                        attempt,
                        retry.max_attempts,
                        delay,
                        error,
                    )
                    self._notify("on_retry_attempt", step.copy(), attempt, retry.max_attempts, int(delay * 1000), error)

                executor.execute(write, on_retry=on_retry)
        except StepError as exc:
            step.rollback_count += 1
            self._notify("on_chunk_error", step.copy(), size, exc)
            raise

        step.write_count += size
        step.commit_count += 1
        step.commit_position = step.restart_offset + step.read_count
        logger.debug("Step '%s' committed chunk of %d item(s)", step.step_name, size)
        self._notify("after_chunk", step.copy(), size)

    def _notify(self, method: str, *args: Any) -> None:
        if self._listener is not None:
            call_optional(self._listener, method, logger, *args)
