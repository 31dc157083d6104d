"""Configuration models for chunk-batch-framework.

This package provides dataconf-based configuration models for defining
batch jobs in a type-safe, declarative manner using HOCON format.
"""

from chunk_batch_framework.core.config.base import (
    LogFormat,
    LogLevel,
    MetricsBackend,
    RepositoryBackend,
    RunIdStrategy,
)
from chunk_batch_framework.core.config.hooks import HooksConfig, LoggingConfig, MetricsConfig
from chunk_batch_framework.core.config.job import JobConfig
from chunk_batch_framework.core.config.loader import (
    ConfigLoadError,
    load_from_env,
    load_from_file,
    load_from_string,
    load_job_config,
)
from chunk_batch_framework.core.config.repository import RepositoryConfig
from chunk_batch_framework.core.config.retry import RetryConfig
from chunk_batch_framework.core.config.step import ComponentRef, StepConfig
from chunk_batch_framework.core.config.validator import (
    DryRunResult,
    ValidationError,
    ValidationPhase,
    ValidationResult,
    dry_run,
    validate_job,
)

__all__ = [
    "ComponentRef",
    "ConfigLoadError",
    "DryRunResult",
    "HooksConfig",
    "JobConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "MetricsBackend",
    "MetricsConfig",
    "RepositoryBackend",
    "RepositoryConfig",
    "RetryConfig",
    "RunIdStrategy",
    "StepConfig",
    "ValidationError",
    "ValidationPhase",
    "ValidationResult",
    "dry_run",
    "load_from_env",
    "load_from_file",
    "load_from_string",
    "load_job_config",
    "validate_job",
]
