"""Job configuration validation without running anything.

Provides lightweight validation (class path resolution, base class checks)
and full dry-run validation (component instantiation without reading a
single record). Both modes are designed for CI/CD pre-flight checks.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from chunk_batch_framework.core.config.job import JobConfig
from chunk_batch_framework.core.config.step import ComponentRef, StepConfig
from chunk_batch_framework.core.item.base import ItemProcessor, RecordSink, RecordSource
from chunk_batch_framework.runtime.loader import instantiate, validate_class

logger = logging.getLogger(__name__)


class ValidationPhase(str, enum.Enum):
    """Phase in which a validation error occurred."""

    REQUIRED_FIELDS = "required-fields"
    TYPE_RESOLUTION = "type-resolution"
    COMPONENT_CONFIG = "component-config"


@dataclass
class ValidationError:
    """A single validation error.

    Args:
        phase: The validation phase that produced this error.
        message: Human-readable error description.
        step_name: Name of the step involved, if applicable.
    """

    phase: ValidationPhase
    message: str
    step_name: str | None = None


@dataclass
class ValidationResult:
    """Outcome of a job validation.

    Args:
        errors: Fatal issues that would prevent the job from running.
        warnings: Non-fatal concerns worth noting.
    """

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return ``True`` if no errors were found."""
        return len(self.errors) == 0


@dataclass
class DryRunResult:
    """Outcome of a job dry run.

    Args:
        errors: Components that failed instantiation.
        instantiated: ``step.role`` labels of components built successfully.
    """

    errors: list[ValidationError] = field(default_factory=list)
    instantiated: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return ``True`` if all components instantiated successfully."""
        return len(self.errors) == 0


def _components(step: StepConfig) -> list[tuple[str, ComponentRef, type[Any]]]:
    refs: list[tuple[str, ComponentRef, type[Any]]] = [("reader", step.reader, RecordSource)]
    if step.processor is not None:
        refs.append(("processor", step.processor, ItemProcessor))
    refs.append(("writer", step.writer, RecordSink))
    return refs


def validate_job(config: JobConfig) -> ValidationResult:
    """Validate a job configuration statically.

    Checks that every reader, processor and writer class path of the
    enabled steps resolves to a subclass of the matching base class, and
    reports unimplemented abstract methods as warnings.
    """
    result = ValidationResult()

    if not config.enabled_steps:
        result.errors.append(ValidationError(ValidationPhase.REQUIRED_FIELDS, f"Job '{config.name}' has no enabled steps"))

    for step in config.enabled_steps:
        for role, ref, base in _components(step):
            try:
                for w in validate_class(ref.class_path, base):
                    result.warnings.append(f"[{step.name}.{role}] {w}")
            except Exception as exc:
                result.errors.append(
                    ValidationError(
                        ValidationPhase.TYPE_RESOLUTION,
                        f"Cannot load {role} '{ref.class_path}': {exc}",
                        step_name=step.name,
                    )
                )

    if not result.is_valid:
        logger.debug("Job '%s' failed validation with %d error(s)", config.name, len(result.errors))
    return result


def dry_run(config: JobConfig) -> DryRunResult:
    """Instantiate every component of the enabled steps without running them.

    This goes further than :func:`validate_job` by actually calling
    ``from_config()`` (or the constructor) on each component, catching
    settings that do not match what the class expects.
    """
    result = DryRunResult()

    for step in config.enabled_steps:
        for role, ref, base in _components(step):
            try:
                instantiate(ref, base)
                result.instantiated.append(f"{step.name}.{role}")
            except Exception as exc:
                result.errors.append(
                    ValidationError(
                        ValidationPhase.COMPONENT_CONFIG,
                        f"Failed to instantiate {role} '{ref.class_path}': {exc}",
                        step_name=step.name,
                    )
                )

    return result
