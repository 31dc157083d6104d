"""Base types and enums for configuration models."""

from enum import Enum


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"


class MetricsBackend(str, Enum):
    """Metrics collection backends."""

    MEMORY = "memory"
    PROMETHEUS = "prometheus"
    OPENTELEMETRY = "opentelemetry"


class RepositoryBackend(str, Enum):
    """Execution repository storage backends."""

    MEMORY = "memory"
    SQLITE = "sqlite"


class RunIdStrategy(str, Enum):
    """How a run identifier is generated when none is given explicitly."""

    INCREMENT = "increment"
    UUID = "uuid"
