"""Tests for job, step, repository and hooks configuration models."""

import pytest

from chunk_batch_framework.core.config.base import (
    LogFormat,
    LogLevel,
    RepositoryBackend,
    RunIdStrategy,
)
from chunk_batch_framework.core.config.hooks import HooksConfig, LoggingConfig
from chunk_batch_framework.core.config.job import JobConfig
from chunk_batch_framework.core.config.repository import RepositoryConfig
from chunk_batch_framework.core.config.step import ComponentRef, StepConfig
from tests.factories import make_job_config, make_step_config


class TestComponentRef:
    def test_defaults(self) -> None:
        ref = ComponentRef("a.b.C")
        assert ref.config == {}

    def test_requires_class_path(self) -> None:
        with pytest.raises(ValueError, match="class_path is required"):
            ComponentRef("")


class TestStepConfig:
    def test_defaults(self) -> None:
        step = StepConfig(name="load", reader=ComponentRef("a.R"), writer=ComponentRef("a.W"))
        assert step.processor is None
        assert step.commit_interval == 100
        assert step.retry is None
        assert step.enabled is True

    def test_requires_name(self) -> None:
        with pytest.raises(ValueError, match="name is required"):
            make_step_config(name="")

    def test_commit_interval_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="commit_interval must be at least 1"):
            make_step_config(commit_interval=0)


class TestJobConfig:
    def test_defaults(self) -> None:
        config = make_job_config()
        assert config.repository.backend is RepositoryBackend.MEMORY
        assert config.run_id_strategy is RunIdStrategy.INCREMENT
        assert config.hooks.logging.level is LogLevel.INFO
        assert config.tags == {}

    def test_requires_steps(self) -> None:
        with pytest.raises(ValueError, match="At least one step is required"):
            JobConfig(name="job", version="1", steps=[])

    def test_requires_name_and_version(self) -> None:
        with pytest.raises(ValueError, match="name is required"):
            JobConfig(name="", version="1", steps=[make_step_config()])
        with pytest.raises(ValueError, match="version is required"):
            JobConfig(name="job", version="", steps=[make_step_config()])

    def test_step_names_must_be_unique(self) -> None:
        with pytest.raises(ValueError, match="Step names must be unique"):
            make_job_config([make_step_config("a"), make_step_config("a")])

    def test_get_step(self) -> None:
        config = make_job_config([make_step_config("a"), make_step_config("b")])
        step = config.get_step("b")
        assert step is not None and step.name == "b"
        assert config.get_step("missing") is None

    def test_enabled_steps_keep_order(self) -> None:
        config = make_job_config(
            [make_step_config("a"), make_step_config("b", enabled=False), make_step_config("c")]
        )
        assert [s.name for s in config.enabled_steps] == ["a", "c"]


class TestRepositoryConfig:
    def test_sqlite_requires_path(self) -> None:
        with pytest.raises(ValueError, match="path is required"):
            RepositoryConfig(backend=RepositoryBackend.SQLITE)

    def test_sqlite_with_path(self) -> None:
        config = RepositoryConfig(backend=RepositoryBackend.SQLITE, path="batch.db")
        assert config.path == "batch.db"


class TestHooksConfig:
    def test_default_logging_is_created(self) -> None:
        config = HooksConfig()
        assert config.logging == LoggingConfig()
        assert config.logging.format is LogFormat.TEXT
        assert config.metrics is None
        assert config.timing is True
