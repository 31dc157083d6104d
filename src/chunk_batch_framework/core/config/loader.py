"""HOCON job configuration loading via dataconf.

Job files are HOCON documents mapped onto the dataclasses in this package.
Environment variables can override any field of a file-based config, which
is how deployments swap the repository path or a step's commit interval
without editing the job file.
"""

from pathlib import Path
from typing import TypeVar, cast

import dataconf

from chunk_batch_framework.core.config.job import JobConfig

T = TypeVar("T")


class ConfigLoadError(Exception):
    """A job configuration could not be parsed or failed validation."""

    def __init__(self, origin: str, cause: Exception) -> None:
        self.origin = origin
        self.cause = cause
        super().__init__(f"Invalid configuration in {origin}: {cause}")
        self.__cause__ = cause


def load_from_file(path: str | Path, config_class: type[T]) -> T:
    """Load configuration from a HOCON file.

    Args:
        path: Path to the HOCON configuration file.
        config_class: The configuration dataclass type to load into.

    Raises:
        ConfigLoadError: If the file cannot be parsed or validated.
    """
    try:
        return cast(T, dataconf.file(str(path), config_class))
    except Exception as exc:
        raise ConfigLoadError(str(path), exc) from exc


def load_from_string(hocon_str: str, config_class: type[T]) -> T:
    """Load configuration from a HOCON string.

    Example:
        >>> hocon = '''
        ... name: "import-people"
        ... version: "1.0.0"
        ... steps: [{name: "load", reader {class_path: "a.Source"}, writer {class_path: "a.Sink"}}]
        ... '''
        >>> config = load_from_string(hocon, JobConfig)
    """
    try:
        return cast(T, dataconf.string(hocon_str, config_class))
    except Exception as exc:
        raise ConfigLoadError("<string>", exc) from exc


def load_from_env(prefix: str, config_class: type[T]) -> T:
    """Load configuration from environment variables.

    Variables use the format ``PREFIX_FIELD_NAME=value``; nested fields use
    double underscores, e.g. ``CBF_REPOSITORY__PATH=batch.db``.
    """
    try:
        return cast(T, dataconf.env(prefix, config_class))
    except Exception as exc:
        raise ConfigLoadError(f"environment ({prefix}*)", exc) from exc


def load_job_config(path: str | Path, env_prefix: str | None = None) -> JobConfig:
    """Load a :class:`JobConfig` from *path*, optionally overridden by env vars.

    Args:
        path: HOCON job file.
        env_prefix: When set, variables starting with this prefix override
            values from the file (e.g. ``"CBF_"``).

    Raises:
        ConfigLoadError: If the merged configuration is invalid.
    """
    if env_prefix is None:
        return load_from_file(path, JobConfig)
    try:
        return cast(JobConfig, dataconf.multi.file(str(path)).env(env_prefix).on(JobConfig))
    except Exception as exc:
        raise ConfigLoadError(str(path), exc) from exc
