"""Execution repository: job/step execution records and their storage."""

from chunk_batch_framework.core.config.base import RepositoryBackend
from chunk_batch_framework.core.config.repository import RepositoryConfig
from chunk_batch_framework.repository.base import ExecutionRepository
from chunk_batch_framework.repository.exceptions import (
    DuplicateRunError,
    InvalidTransitionError,
    JobExecutionNotFoundError,
    JobRestartError,
    RepositoryError,
)
from chunk_batch_framework.repository.memory import InMemoryExecutionRepository
from chunk_batch_framework.repository.models import (
    BatchStatus,
    JobExecution,
    StepExecution,
    validate_transition,
)
from chunk_batch_framework.repository.sqlite import SqliteExecutionRepository


def create_repository(config: RepositoryConfig) -> ExecutionRepository:
    """Build the repository described by *config*.

    Call once at process start and ``close()`` it on shutdown.
    """
    if config.backend is RepositoryBackend.SQLITE:
        assert config.path is not None  # enforced by RepositoryConfig
        return SqliteExecutionRepository(config.path)
    return InMemoryExecutionRepository()


__all__ = [
    "BatchStatus",
    "DuplicateRunError",
    "ExecutionRepository",
    "InMemoryExecutionRepository",
    "InvalidTransitionError",
    "JobExecution",
    "JobExecutionNotFoundError",
    "JobRestartError",
    "RepositoryError",
    "SqliteExecutionRepository",
    "StepExecution",
    "create_repository",
    "validate_transition",
]
