"""Run identifier strategies."""

from __future__ import annotations

import uuid
from typing import Protocol

from chunk_batch_framework.core.config.base import RunIdStrategy
from chunk_batch_framework.repository.base import ExecutionRepository


class RunIdGenerator(Protocol):
    """Produces the run id for the next execution of a job."""

    def next_run_id(self, job_name: str) -> str: ...


class RunIdIncrementer:
    """Numbers runs 1, 2, 3, ... per job.

    The next id is one more than the largest integer run id already
    recorded for the job. Non-numeric run ids are ignored.
    """

    def __init__(self, repository: ExecutionRepository) -> None:
        self._repository = repository

    def next_run_id(self, job_name: str) -> str:
        numbers = [
            int(e.run_id)
            for e in self._repository.list_executions(job_name)
            if e.run_id.isascii() and e.run_id.isdigit()
        ]
        return str(max(numbers, default=0) + 1)


class UuidRunIdGenerator:
    """Gives every run a fresh random id."""

    def next_run_id(self, job_name: str) -> str:
        return uuid.uuid4().hex


def create_run_id_generator(strategy: RunIdStrategy, repository: ExecutionRepository) -> RunIdGenerator:
    if strategy is RunIdStrategy.UUID:
        return UuidRunIdGenerator()
    return RunIdIncrementer(repository)
