"""Concurrency tests for thread-safe components.

Validates that execution repositories, the launcher and InMemoryRegistry
behave correctly when many threads race for the same run.
"""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from chunk_batch_framework.core.metrics.registry import InMemoryRegistry
from chunk_batch_framework.repository.base import ExecutionRepository
from chunk_batch_framework.repository.exceptions import DuplicateRunError
from chunk_batch_framework.repository.memory import InMemoryExecutionRepository
from chunk_batch_framework.repository.models import BatchStatus
from chunk_batch_framework.repository.sqlite import SqliteExecutionRepository
from chunk_batch_framework.runner.launcher import JobLauncher
from tests.factories import make_job, make_step

THREADS = 8
ITERATIONS = 500


def _race(target: object, threads: int = THREADS) -> None:
    barrier = threading.Barrier(threads)

    def run() -> None:
        barrier.wait()
        target()  # type: ignore[operator]

    workers = [threading.Thread(target=run) for _ in range(threads)]
    for t in workers:
        t.start()
    for t in workers:
        t.join(timeout=10)


@pytest.fixture(params=["memory", "sqlite"])
def repository(request: pytest.FixtureRequest, tmp_path: Path) -> ExecutionRepository:
    if request.param == "memory":
        return InMemoryExecutionRepository()
    return SqliteExecutionRepository(tmp_path / "batch.db")


class TestRunIdRace:
    """Concurrent launches of the same run id."""

    def test_exactly_one_create_wins(self, repository: ExecutionRepository) -> None:
        wins: list[str] = []
        losses: list[DuplicateRunError] = []
        lock = threading.Lock()

        def claim() -> None:
            try:
                execution = repository.create_execution("job", "1")
            except DuplicateRunError as exc:
                with lock:
                    losses.append(exc)
            else:
                with lock:
                    wins.append(execution.execution_id)

        _race(claim)
        repository.close()

        assert len(wins) == 1
        assert len(losses) == THREADS - 1

    def test_exactly_one_launch_runs(self, repository: ExecutionRepository) -> None:
        launcher = JobLauncher(repository)
        results: list[BatchStatus] = []
        duplicates: list[DuplicateRunError] = []
        lock = threading.Lock()

        def launch() -> None:
            job = make_job([make_step(items=range(20))])
            try:
                execution = launcher.launch(job, "1")
            except DuplicateRunError as exc:
                with lock:
                    duplicates.append(exc)
            else:
                with lock:
                    results.append(execution.status)

        _race(launch)

        assert results == [BatchStatus.COMPLETED]
        assert len(duplicates) == THREADS - 1
        assert len(repository.list_executions("test-job")) == 1
        repository.close()

    def test_distinct_run_ids_all_run(self, repository: ExecutionRepository) -> None:
        launcher = JobLauncher(repository)
        counter = iter(range(THREADS))
        lock = threading.Lock()

        def launch() -> None:
            with lock:
                run_id = str(next(counter))
            launcher.launch(make_job([make_step(items=range(10))]), run_id)

        _race(launch)

        executions = repository.list_executions("test-job")
        assert len(executions) == THREADS
        assert all(e.status is BatchStatus.COMPLETED for e in executions)
        repository.close()


class TestInMemoryRegistryConcurrency:
    """Concurrent metric recording."""

    def test_concurrent_counter_and_timer(self) -> None:
        registry = InMemoryRegistry()

        def record() -> None:
            for _ in range(ITERATIONS):
                registry.counter("cbf_items_read", tags={"job": "j"})
                registry.timer("cbf_step_duration_ms", 1.0)

        _race(record)

        assert registry.get_counter("cbf_items_read", {"job": "j"}) == THREADS * ITERATIONS
        assert registry.get_timer_count("cbf_step_duration_ms") == THREADS * ITERATIONS
