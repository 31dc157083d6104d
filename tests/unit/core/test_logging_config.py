"""Tests for process-wide logging setup."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from chunk_batch_framework.core.config.base import LogFormat, LogLevel
from chunk_batch_framework.core.config.hooks import LoggingConfig
from chunk_batch_framework.core.logging_config import JsonLogFormatter, configure_logging


def _record(msg: str = "hello %s", args: tuple[object, ...] = ("world",), **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("cbf.job", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestJsonLogFormatter:
    def test_core_fields(self) -> None:
        payload = json.loads(JsonLogFormatter().format(_record()))
        assert payload["level"] == "info"
        assert payload["logger"] == "cbf.job"
        assert payload["message"] == "hello world"
        assert payload["timestamp"].endswith("+00:00")
        assert "exception" not in payload

    def test_extra_fields_are_included(self) -> None:
        payload = json.loads(JsonLogFormatter().format(_record(run_id="7", job_name="people")))
        assert payload["run_id"] == "7"
        assert payload["job_name"] == "people"

    def test_exception_is_formatted(self) -> None:
        try:
            raise ValueError("bad row")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        payload = json.loads(JsonLogFormatter().format(record))
        assert "ValueError: bad row" in payload["exception"]

    def test_non_serializable_extra_uses_str(self) -> None:
        payload = json.loads(JsonLogFormatter().format(_record(path=Path("/tmp/a"))))
        assert payload["path"] == "/tmp/a"


class TestConfigureLogging:
    def test_single_root_handler_with_level(self, restore_root_logger: logging.Logger) -> None:
        configure_logging(LoggingConfig(level=LogLevel.WARNING))
        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.WARNING

    def test_level_override(self, restore_root_logger: logging.Logger) -> None:
        configure_logging(LoggingConfig(level=LogLevel.WARNING), level="DEBUG")
        assert restore_root_logger.level == logging.DEBUG

    def test_json_to_file(self, tmp_path: Path, restore_root_logger: logging.Logger) -> None:
        log_file = tmp_path / "run.log"
        configure_logging(LoggingConfig(format=LogFormat.JSON, output=str(log_file)))

        logging.getLogger("cbf.job").info("Job %s started", "people")
        for handler in restore_root_logger.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip()
        assert json.loads(line)["message"] == "Job people started"

    def test_text_format(self, restore_root_logger: logging.Logger) -> None:
        configure_logging(LoggingConfig(output="stdout"))
        (handler,) = restore_root_logger.handlers
        assert not isinstance(handler.formatter, JsonLogFormatter)
