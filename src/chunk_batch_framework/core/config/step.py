"""Step configuration models."""

from dataclasses import dataclass, field
from typing import Any

from chunk_batch_framework.core.config.retry import RetryConfig


@dataclass
class ComponentRef:
    """Reference to a source, processor or sink class plus its settings."""

    class_path: str
    """Fully qualified Python class path to instantiate (required)"""

    config: dict[str, Any] = field(default_factory=dict)
    """Keyword settings passed to ``from_config`` or the constructor (default: {})"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.class_path:
            raise ValueError("class_path is required")


@dataclass
class StepConfig:
    """Configuration for one chunk-oriented read/process/write step."""

    name: str
    """Unique step name within the job (required)"""

    reader: ComponentRef
    """Record source (required)"""

    writer: ComponentRef
    """Record sink (required)"""

    processor: ComponentRef | None = None
    """Item processor (optional; items pass through unchanged when omitted)"""

    commit_interval: int = 100
    """Maximum number of items per chunk before a write (default: 100)"""

    retry: RetryConfig | None = None
    """Chunk write retry policy (optional; no retry when omitted)"""

    enabled: bool = True
    """Whether this step runs (default: True)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")
        if self.commit_interval < 1:
            raise ValueError("commit_interval must be at least 1")
