"""Execution repository configuration model."""

from dataclasses import dataclass

from chunk_batch_framework.core.config.base import RepositoryBackend


@dataclass
class RepositoryConfig:
    """Where job and step execution records are stored."""

    backend: RepositoryBackend = RepositoryBackend.MEMORY
    """Storage backend (default: memory)"""

    path: str | None = None
    """Database file for the sqlite backend (required for sqlite)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.backend is RepositoryBackend.SQLITE and not self.path:
            raise ValueError("path is required for the sqlite repository backend")
