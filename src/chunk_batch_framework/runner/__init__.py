"""Job runner: listeners, chunk execution and job launching."""

from chunk_batch_framework.runner.chunk_executor import ChunkExecutor
from chunk_batch_framework.runner.hooks import (
    CompositeListener,
    JobListener,
    NoOpListener,
    StepListener,
)
from chunk_batch_framework.runner.hooks_builtin import (
    LoggingListener,
    MetricsListener,
    TimingListener,
    build_listener,
)
from chunk_batch_framework.runner.job import Job, Step, build_job
from chunk_batch_framework.runner.launcher import JobLauncher
from chunk_batch_framework.runner.run_id import (
    RunIdGenerator,
    RunIdIncrementer,
    UuidRunIdGenerator,
    create_run_id_generator,
)

__all__ = [
    "ChunkExecutor",
    "CompositeListener",
    "Job",
    "JobLauncher",
    "JobListener",
    "LoggingListener",
    "MetricsListener",
    "NoOpListener",
    "RunIdGenerator",
    "RunIdIncrementer",
    "Step",
    "StepListener",
    "TimingListener",
    "UuidRunIdGenerator",
    "build_job",
    "build_listener",
    "create_run_id_generator",
]
