"""Job configuration models."""

from dataclasses import dataclass, field

from .base import RunIdStrategy
from .hooks import HooksConfig
from .repository import RepositoryConfig
from .step import StepConfig


@dataclass
class JobConfig:
    """Top-level configuration for a batch job.

    A job is a named, repeatable unit of work made of one or more steps
    that run sequentially in declaration order.
    """

    name: str
    """Job name (required)"""

    version: str
    """Job version (required)"""

    steps: list[StepConfig]
    """Steps in execution order (required)"""

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    """Execution repository (default: in-memory)"""

    hooks: HooksConfig = field(default_factory=HooksConfig)
    """Built-in listener configuration (default: HooksConfig with defaults)"""

    run_id_strategy: RunIdStrategy = RunIdStrategy.INCREMENT
    """Run id generation when none is given (default: increment)"""

    tags: dict[str, str] = field(default_factory=dict)
    """Arbitrary key-value tags for metadata (default: {})"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")

        if not self.version:
            raise ValueError("version is required")

        if not self.steps:
            raise ValueError("At least one step is required")

        step_names = [s.name for s in self.steps]
        if len(step_names) != len(set(step_names)):
            raise ValueError("Step names must be unique")

    def get_step(self, name: str) -> StepConfig | None:
        """Get a step by name.

        Args:
            name: Step name to look up.

        Returns:
            StepConfig if found, None otherwise.
        """
        for step in self.steps:
            if step.name == name:
                return step
        return None

    @property
    def enabled_steps(self) -> list[StepConfig]:
        """Return enabled steps in execution order."""
        return [s for s in self.steps if s.enabled]
