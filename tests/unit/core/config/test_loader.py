"""Tests for HOCON job configuration loading."""

from pathlib import Path

import pytest

from chunk_batch_framework.core.config.base import LogFormat, RepositoryBackend, RunIdStrategy
from chunk_batch_framework.core.config.job import JobConfig
from chunk_batch_framework.core.config.loader import (
    ConfigLoadError,
    load_from_env,
    load_from_file,
    load_from_string,
    load_job_config,
)

JOB_HOCON = """
name: "import-people"
version: "1.0.0"
run_id_strategy: uuid
repository {
  backend: sqlite
  path: "/tmp/batch.db"
}
hooks {
  logging { level: DEBUG, format: json }
  timing: false
}
steps: [
  {
    name: "load"
    commit_interval: 500
    reader {
      class_path: "chunk_batch_framework.adapters.memory.IterableSource"
      config { items: [1, 2, 3] }
    }
    processor { class_path: "tests.factories.RejectOddProcessor" }
    writer { class_path: "chunk_batch_framework.adapters.memory.ListSink" }
    retry {
      max_attempts: 5
      initial_delay_seconds: 0.5
      retry_on_exceptions: ["OperationalError"]
    }
  }
]
tags { owner: "data-eng" }
"""


class TestLoadFromString:
    def test_full_job(self) -> None:
        config = load_from_string(JOB_HOCON, JobConfig)

        assert config.name == "import-people"
        assert config.run_id_strategy is RunIdStrategy.UUID
        assert config.repository.backend is RepositoryBackend.SQLITE
        assert config.hooks.logging.format is LogFormat.JSON
        assert config.hooks.timing is False
        assert config.tags == {"owner": "data-eng"}

        step = config.steps[0]
        assert step.commit_interval == 500
        assert step.reader.config == {"items": [1, 2, 3]}
        assert step.processor is not None
        assert step.processor.class_path == "tests.factories.RejectOddProcessor"
        assert step.writer.config == {}
        assert step.retry is not None
        assert step.retry.max_attempts == 5
        assert step.retry.retry_on_exceptions == ["OperationalError"]

    def test_post_init_errors_become_config_load_error(self) -> None:
        hocon = """
        name: "job"
        version: "1"
        steps: [{ name: "a", commit_interval: 0, reader { class_path: "x.R" }, writer { class_path: "x.W" } }]
        """
        with pytest.raises(ConfigLoadError, match="<string>") as exc_info:
            load_from_string(hocon, JobConfig)
        assert exc_info.value.origin == "<string>"
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_missing_required_field(self) -> None:
        with pytest.raises(ConfigLoadError):
            load_from_string('name: "job"', JobConfig)


class TestLoadFromFile:
    def test_file_matches_string(self, tmp_path: Path) -> None:
        path = tmp_path / "job.conf"
        path.write_text(JOB_HOCON, encoding="utf-8")

        assert load_from_file(path, JobConfig) == load_from_string(JOB_HOCON, JobConfig)

    def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.conf"
        with pytest.raises(ConfigLoadError) as exc_info:
            load_from_file(missing, JobConfig)
        assert exc_info.value.origin == str(missing)


class TestLoadJobConfig:
    def test_without_env_prefix(self, tmp_path: Path) -> None:
        path = tmp_path / "job.conf"
        path.write_text(JOB_HOCON, encoding="utf-8")
        assert load_job_config(path).name == "import-people"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "job.conf"
        path.write_text(JOB_HOCON, encoding="utf-8")
        monkeypatch.setenv("CBFTEST_VERSION", "nightly")

        config = load_job_config(path, env_prefix="CBFTEST_")

        assert config.version == "nightly"
        assert config.name == "import-people"

    def test_env_prefix_with_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_job_config(tmp_path / "missing.conf", env_prefix="CBFTEST_")


class TestLoadFromEnv:
    def test_incomplete_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CBFEMPTY_NAME", "job")
        with pytest.raises(ConfigLoadError, match="environment"):
            load_from_env("CBFEMPTY_", JobConfig)
