"""Behaviour shared by every execution repository backend."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from chunk_batch_framework.core.config.base import RepositoryBackend
from chunk_batch_framework.core.config.repository import RepositoryConfig
from chunk_batch_framework.repository import create_repository
from chunk_batch_framework.repository.base import ExecutionRepository
from chunk_batch_framework.repository.exceptions import (
    DuplicateRunError,
    InvalidTransitionError,
    JobExecutionNotFoundError,
)
from chunk_batch_framework.repository.memory import InMemoryExecutionRepository
from chunk_batch_framework.repository.models import BatchStatus, StepExecution
from chunk_batch_framework.repository.sqlite import SqliteExecutionRepository


@pytest.fixture(params=["memory", "sqlite"])
def repository(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[ExecutionRepository]:
    repo: ExecutionRepository
    if request.param == "memory":
        repo = InMemoryExecutionRepository()
    else:
        repo = SqliteExecutionRepository(tmp_path / "batch.db")
    yield repo
    repo.close()


class TestJobExecutions:
    def test_satisfies_protocol(self, repository: ExecutionRepository) -> None:
        assert isinstance(repository, ExecutionRepository)

    def test_create_and_get(self, repository: ExecutionRepository) -> None:
        created = repository.create_execution("job", "1")

        assert created.status is BatchStatus.STARTING
        fetched = repository.get_execution("job", "1")
        assert fetched is not None
        assert fetched.execution_id == created.execution_id
        assert repository.get_execution_by_id(created.execution_id) is not None
        assert repository.get_execution("job", "2") is None
        assert repository.get_execution_by_id("nope") is None

    def test_duplicate_run_id_reports_existing_status(self, repository: ExecutionRepository) -> None:
        created = repository.create_execution("job", "1")
        repository.update_status(created.execution_id, BatchStatus.STARTED)
        repository.update_status(created.execution_id, BatchStatus.FAILED, "boom")

        with pytest.raises(DuplicateRunError) as exc_info:
            repository.create_execution("job", "1")

        assert exc_info.value.existing_status == "FAILED"
        assert len(repository.list_executions("job")) == 1

    def test_run_id_is_scoped_to_job(self, repository: ExecutionRepository) -> None:
        repository.create_execution("a", "1")
        repository.create_execution("b", "1")
        assert len(repository.list_executions("a")) == 1

    def test_status_lifecycle_sets_times(self, repository: ExecutionRepository) -> None:
        created = repository.create_execution("job", "1")

        started = repository.update_status(created.execution_id, BatchStatus.STARTED)
        assert started.start_time is not None
        assert started.end_time is None

        done = repository.update_status(created.execution_id, BatchStatus.COMPLETED)
        assert done.end_time is not None
        assert done.failure_cause is None

    def test_failure_cause_persists(self, repository: ExecutionRepository) -> None:
        created = repository.create_execution("job", "1")
        repository.update_status(created.execution_id, BatchStatus.FAILED, "RuntimeError: x")

        fetched = repository.get_execution("job", "1")
        assert fetched is not None
        assert fetched.status is BatchStatus.FAILED
        assert fetched.failure_cause == "RuntimeError: x"

    def test_illegal_transition_is_rejected(self, repository: ExecutionRepository) -> None:
        created = repository.create_execution("job", "1")
        with pytest.raises(InvalidTransitionError):
            repository.update_status(created.execution_id, BatchStatus.COMPLETED)

        fetched = repository.get_execution("job", "1")
        assert fetched is not None and fetched.status is BatchStatus.STARTING

    def test_update_unknown_execution(self, repository: ExecutionRepository) -> None:
        with pytest.raises(JobExecutionNotFoundError):
            repository.update_status("nope", BatchStatus.STARTED)

    def test_restarted_from_round_trips(self, repository: ExecutionRepository) -> None:
        repository.create_execution("job", "2", restarted_from="1")
        fetched = repository.get_execution("job", "2")
        assert fetched is not None and fetched.restarted_from == "1"

    def test_list_and_last_in_creation_order(self, repository: ExecutionRepository) -> None:
        assert repository.get_last_execution("job") is None
        for run_id in ("1", "2", "3"):
            repository.create_execution("job", run_id)

        assert [e.run_id for e in repository.list_executions("job")] == ["1", "2", "3"]
        last = repository.get_last_execution("job")
        assert last is not None and last.run_id == "3"

    def test_returned_objects_are_snapshots(self, repository: ExecutionRepository) -> None:
        created = repository.create_execution("job", "1")
        created.status = BatchStatus.COMPLETED

        fetched = repository.get_execution("job", "1")
        assert fetched is not None and fetched.status is BatchStatus.STARTING


class TestStepExecutions:
    def test_add_and_update(self, repository: ExecutionRepository) -> None:
        execution = repository.create_execution("job", "1")
        step = repository.add_step_execution(execution.execution_id, StepExecution(step_name="load"))
        assert step.job_execution_id == execution.execution_id

        step.transition_to(BatchStatus.STARTED)
        step.read_count, step.write_count, step.skip_count = 5, 4, 1
        step.commit_count = 2
        step.commit_position = 5
        repository.update_step_execution(step)

        fetched = repository.get_execution("job", "1")
        assert fetched is not None
        stored = fetched.get_step("load")
        assert stored is not None
        assert stored.status is BatchStatus.STARTED
        assert (stored.read_count, stored.write_count, stored.skip_count) == (5, 4, 1)
        assert stored.commit_position == 5

    def test_steps_keep_order(self, repository: ExecutionRepository) -> None:
        execution = repository.create_execution("job", "1")
        for name in ("b", "a", "c"):
            repository.add_step_execution(execution.execution_id, StepExecution(step_name=name))

        fetched = repository.get_execution("job", "1")
        assert fetched is not None
        assert [s.step_name for s in fetched.step_executions] == ["b", "a", "c"]

    def test_add_to_unknown_execution(self, repository: ExecutionRepository) -> None:
        with pytest.raises(JobExecutionNotFoundError):
            repository.add_step_execution("nope", StepExecution(step_name="load"))

    def test_update_unknown_step(self, repository: ExecutionRepository) -> None:
        execution = repository.create_execution("job", "1")
        with pytest.raises(JobExecutionNotFoundError):
            repository.update_step_execution(StepExecution(step_name="x", job_execution_id=execution.execution_id))


class TestSqlitePersistence:
    def test_survives_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "batch.db"
        first = SqliteExecutionRepository(path)
        execution = first.create_execution("job", "1")
        first.update_status(execution.execution_id, BatchStatus.STARTED)
        first.close()

        second = SqliteExecutionRepository(path)
        try:
            with pytest.raises(DuplicateRunError) as exc_info:
                second.create_execution("job", "1")
            assert exc_info.value.existing_status == "STARTED"
        finally:
            second.close()

    def test_in_memory_database(self) -> None:
        repository = SqliteExecutionRepository(":memory:")
        try:
            repository.create_execution("job", "1")
            assert repository.get_execution("job", "1") is not None
        finally:
            repository.close()

    def test_update_status_raises_when_row_vanishes_before_reload(self) -> None:
        repository = SqliteExecutionRepository(":memory:")
        try:
            execution = repository.create_execution("job", "1")
            with patch.object(repository, "_load_by_id", return_value=None):
                with pytest.raises(JobExecutionNotFoundError):
                    repository.update_status(execution.execution_id, BatchStatus.STARTED)
        finally:
            repository.close()


class TestCreateRepository:
    def test_memory(self) -> None:
        assert isinstance(create_repository(RepositoryConfig()), InMemoryExecutionRepository)

    def test_sqlite(self, tmp_path: Path) -> None:
        repository = create_repository(RepositoryConfig(backend=RepositoryBackend.SQLITE, path=str(tmp_path / "b.db")))
        try:
            assert isinstance(repository, SqliteExecutionRepository)
        finally:
            repository.close()
