"""Job and step composition."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from chunk_batch_framework.core.config.job import JobConfig
from chunk_batch_framework.core.config.retry import RetryConfig
from chunk_batch_framework.core.item.base import ItemProcessor, RecordSink, RecordSource
from chunk_batch_framework.runtime.loader import instantiate

logger = logging.getLogger(__name__)


@dataclass
class Step:
    """A chunk-oriented step: one source, an optional processor and one sink.

    A step without a processor writes every item it reads unchanged.
    """

    name: str
    source: RecordSource[Any]
    sink: RecordSink[Any]
    processor: ItemProcessor[Any, Any] | None = None
    commit_interval: int = 100
    retry: RetryConfig | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name is required")
        if self.commit_interval < 1:
            raise ValueError("commit_interval must be at least 1")


@dataclass
class Job:
    """A named, repeatable unit of work made of steps run in order."""

    name: str
    steps: list[Step] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name is required")
        if not self.steps:
            raise ValueError("At least one step is required")
        names = [s.name for s in self.steps]
        if len(names) != len(set(names)):
            raise ValueError("Step names must be unique")

    def get_step(self, name: str) -> Step | None:
        for step in self.steps:
            if step.name == name:
                return step
        return None


def build_job(config: JobConfig) -> Job:
    """Compose a :class:`Job` from configuration.

    Every enabled step's reader, processor and writer is instantiated by
    class path. Disabled steps are left out of the job.

    Raises:
        ComponentInstantiationError: If any component cannot be built.
    """
    steps: list[Step] = []
    for step_config in config.enabled_steps:
        processor = None
        if step_config.processor is not None:
            processor = instantiate(step_config.processor, ItemProcessor)
        steps.append(
            Step(
                name=step_config.name,
                source=instantiate(step_config.reader, RecordSource),
                sink=instantiate(step_config.writer, RecordSink),
                processor=processor,
                commit_interval=step_config.commit_interval,
                retry=step_config.retry,
            )
        )
        logger.debug("Built step '%s' for job '%s'", step_config.name, config.name)
    return Job(name=config.name, steps=steps)
