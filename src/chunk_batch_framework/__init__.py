"""Chunk-oriented batch processing: read, process and write records in committed chunks."""

from chunk_batch_framework.repository import (
    BatchStatus,
    DuplicateRunError,
    InMemoryExecutionRepository,
    JobExecution,
    SqliteExecutionRepository,
    StepExecution,
)
from chunk_batch_framework.runner import ChunkExecutor, Job, JobLauncher, Step, build_job

__version__ = "0.1.0"

__all__ = [
    "BatchStatus",
    "ChunkExecutor",
    "DuplicateRunError",
    "InMemoryExecutionRepository",
    "Job",
    "JobExecution",
    "JobLauncher",
    "SqliteExecutionRepository",
    "Step",
    "StepExecution",
    "__version__",
    "build_job",
]
