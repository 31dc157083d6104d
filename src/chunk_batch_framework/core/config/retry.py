"""Chunk write retry configuration."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retrying a failed chunk write.

    Implements exponential backoff with configurable parameters. The sink
    is atomic per call, so re-sending the same chunk cannot duplicate items.
    Steps without a ``RetryConfig`` fail on the first write error.
    """

    max_attempts: int = 3
    """Maximum number of write attempts per chunk, including the first (default: 3)"""

    initial_delay_seconds: float = 1.0
    """Initial delay between attempts in seconds (default: 1.0)"""

    max_delay_seconds: float = 60.0
    """Maximum delay between attempts in seconds (default: 60.0)"""

    backoff_multiplier: float = 2.0
    """Multiplier for exponential backoff (default: 2.0)"""

    retry_on_exceptions: list[str] = field(default_factory=lambda: ["Exception"])
    """Exception class names that trigger a retry (default: ['Exception'])"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_seconds <= 0:
            raise ValueError("initial_delay_seconds must be positive")
        if self.max_delay_seconds < self.initial_delay_seconds:
            raise ValueError("max_delay_seconds must be >= initial_delay_seconds")
        if self.backoff_multiplier < 1.0:
            raise ValueError("backoff_multiplier must be >= 1.0")
