"""Tests for SqliteBatchSink."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest

from chunk_batch_framework.adapters.sqlite_sink import SqliteBatchSink

DDL = "CREATE TABLE IF NOT EXISTS t (id INTEGER PRIMARY KEY, label TEXT NOT NULL);"


@dataclass
class Row:
    id: int
    label: str


@pytest.fixture
def db(tmp_path: Path) -> str:
    return str(tmp_path / "out.db")


@pytest.fixture
def named_sink(db: str) -> Iterator[SqliteBatchSink]:
    sink = SqliteBatchSink(db, "INSERT INTO t (id, label) VALUES (:id, :label)", DDL)
    sink.open()
    yield sink
    sink.close()


def _rows(db: str) -> list[tuple[int, str]]:
    conn = sqlite3.connect(db)
    try:
        return conn.execute("SELECT id, label FROM t ORDER BY id").fetchall()
    finally:
        conn.close()


class TestSqliteBatchSink:
    def test_writes_mappings_and_dataclasses(self, db: str, named_sink: SqliteBatchSink) -> None:
        named_sink.write([{"id": 1, "label": "a"}, Row(2, "b")])
        assert _rows(db) == [(1, "a"), (2, "b")]

    def test_writes_sequences_positionally(self, db: str) -> None:
        sink = SqliteBatchSink(db, "INSERT INTO t (id, label) VALUES (?, ?)", DDL)
        sink.open()
        try:
            sink.write([(1, "a"), [2, "b"]])
        finally:
            sink.close()
        assert _rows(db) == [(1, "a"), (2, "b")]

    def test_failed_chunk_is_rolled_back(self, db: str, named_sink: SqliteBatchSink) -> None:
        named_sink.write([Row(1, "a")])

        with pytest.raises(sqlite3.IntegrityError):
            named_sink.write([Row(2, "b"), Row(1, "duplicate")])

        assert _rows(db) == [(1, "a")]

    def test_write_before_open(self, db: str) -> None:
        with pytest.raises(RuntimeError, match="not open"):
            SqliteBatchSink(db, "INSERT INTO t VALUES (?, ?)").write([(1, "a")])

    def test_requires_sql(self, db: str) -> None:
        with pytest.raises(ValueError, match="sql is required"):
            SqliteBatchSink(db, "")

    def test_name(self, db: str) -> None:
        assert SqliteBatchSink(db, "SELECT 1").name == f"sqlite:{db}"
