"""Process-wide logging setup for job runs."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from chunk_batch_framework.core.config.base import LogFormat
from chunk_batch_framework.core.config.hooks import LoggingConfig

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Attributes every LogRecord has; anything else came from ``extra=``.
_RESERVED = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JsonLogFormatter(logging.Formatter):
    """Formats each record as one JSON object per line.

    Output keys: ``timestamp`` (ISO 8601, UTC), ``level``, ``logger``,
    ``message``, ``exception`` when present, plus any ``extra`` fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        return json.dumps(payload, default=str)


def _build_handler(output: str) -> logging.Handler:
    if output == "stdout":
        return logging.StreamHandler(sys.stdout)
    if output == "stderr":
        return logging.StreamHandler(sys.stderr)
    return logging.FileHandler(output, encoding="utf-8")


def configure_logging(config: LoggingConfig, level: str | None = None) -> None:
    """Install a single root handler according to *config*.

    Args:
        config: Logging configuration from the job file.
        level: Optional override for ``config.level`` (e.g. from the CLI).
    """
    handler = _build_handler(config.output)
    if config.format is LogFormat.JSON:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level or config.level.value))
