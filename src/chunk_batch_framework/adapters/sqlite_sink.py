"""SQLite record sink writing each chunk in one transaction."""

from __future__ import annotations

import dataclasses
import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

from chunk_batch_framework.core.item.base import RecordSink

logger = logging.getLogger(__name__)


class SqliteBatchSink(RecordSink[Any]):
    """Inserts each chunk with ``executemany`` inside a single transaction.

    Items may be mappings or dataclasses (bound to named ``:param``
    placeholders) or plain sequences (bound to ``?`` placeholders). A
    failure anywhere in the chunk rolls the whole chunk back.

    Args:
        database: SQLite database file.
        sql: Parameterized insert statement.
        create_sql: Optional DDL script run once on :meth:`open`.
    """

    def __init__(self, database: str, sql: str, create_sql: str | None = None) -> None:
        if not sql:
            raise ValueError("sql is required")
        self._database = database
        self._sql = sql
        self._create_sql = create_sql
        self._conn: sqlite3.Connection | None = None

    @property
    def name(self) -> str:
        return f"sqlite:{self._database}"

    def open(self) -> None:
        self._conn = sqlite3.connect(self._database)
        if self._create_sql:
            self._conn.executescript(self._create_sql)
            self._conn.commit()
        logger.debug("Opened %s", self.name)

    def write(self, items: Sequence[Any]) -> None:
        if self._conn is None:
            raise RuntimeError(f"Sink '{self.name}' is not open")
        params = [self._bind(item) for item in items]
        with self._conn:
            self._conn.executemany(self._sql, params)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
        self._conn = None

    @staticmethod
    def _bind(item: Any) -> Any:
        if dataclasses.is_dataclass(item) and not isinstance(item, type):
            return dataclasses.asdict(item)
        if isinstance(item, Mapping):
            return dict(item)
        return tuple(item)
