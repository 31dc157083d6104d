"""Listener configuration models."""

from dataclasses import dataclass

from chunk_batch_framework.core.config.base import LogFormat, LogLevel, MetricsBackend


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""

    level: LogLevel = LogLevel.INFO
    """Logging level (default: INFO)"""

    format: LogFormat = LogFormat.TEXT
    """Log output format (default: text)"""

    output: str = "stderr"
    """Log output destination - stdout, stderr, or file path (default: stderr)"""


@dataclass
class MetricsConfig:
    """Configuration for metrics collection and export."""

    enabled: bool = True
    """Enable metrics collection (default: True)"""

    backend: MetricsBackend = MetricsBackend.MEMORY
    """Metrics backend to use (default: memory)"""


@dataclass
class HooksConfig:
    """Composite configuration for the built-in job listeners."""

    logging: LoggingConfig = None  # type: ignore
    """Logging configuration"""

    metrics: MetricsConfig | None = None
    """Metrics configuration (optional)"""

    timing: bool = True
    """Log job wall time on completion (default: True)"""

    def __post_init__(self) -> None:
        """Initialize default logging if not provided."""
        if self.logging is None:
            self.logging = LoggingConfig()
