"""SQLite-backed execution repository.

Schema::

    batch_job_execution                     batch_step_execution
    ---------------------                   ----------------------
    execution_id  TEXT PK        1 ---- *   step_execution_id  TEXT PK
    job_name      TEXT                      execution_id       TEXT FK
    run_id        TEXT                      seq                INTEGER
    status        TEXT                      step_name          TEXT
    create_time / start_time / end_time     status, counters, timestamps
    failure_cause TEXT                      failure_cause      TEXT
    restarted_from TEXT
    UNIQUE (job_name, run_id)

The UNIQUE constraint is what guarantees that two concurrent launches can
never claim the same run id, including across processes sharing the file.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from chunk_batch_framework.repository.exceptions import DuplicateRunError, JobExecutionNotFoundError
from chunk_batch_framework.repository.models import (
    BatchStatus,
    JobExecution,
    StepExecution,
    utcnow,
    validate_transition,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS batch_job_execution (
    execution_id   TEXT PRIMARY KEY,
    job_name       TEXT NOT NULL,
    run_id         TEXT NOT NULL,
    status         TEXT NOT NULL,
    create_time    TEXT NOT NULL,
    start_time     TEXT,
    end_time       TEXT,
    failure_cause  TEXT,
    restarted_from TEXT,
    UNIQUE (job_name, run_id)
);
CREATE TABLE IF NOT EXISTS batch_step_execution (
    step_execution_id TEXT PRIMARY KEY,
    execution_id      TEXT NOT NULL REFERENCES batch_job_execution (execution_id),
    seq               INTEGER NOT NULL,
    step_name         TEXT NOT NULL,
    status            TEXT NOT NULL,
    read_count        INTEGER NOT NULL DEFAULT 0,
    write_count       INTEGER NOT NULL DEFAULT 0,
    skip_count        INTEGER NOT NULL DEFAULT 0,
    discard_count     INTEGER NOT NULL DEFAULT 0,
    commit_count      INTEGER NOT NULL DEFAULT 0,
    rollback_count    INTEGER NOT NULL DEFAULT 0,
    restart_offset    INTEGER NOT NULL DEFAULT 0,
    commit_position   INTEGER NOT NULL DEFAULT 0,
    start_time        TEXT,
    end_time          TEXT,
    failure_cause     TEXT
);
CREATE INDEX IF NOT EXISTS idx_batch_step_execution_execution
    ON batch_step_execution (execution_id, seq);
"""

_JOB_COLUMNS = (
    "execution_id, job_name, run_id, status, create_time, start_time, end_time, failure_cause, restarted_from"
)
_STEP_COLUMNS = (
    "step_execution_id, execution_id, step_name, status, read_count, write_count, skip_count, "
    "discard_count, commit_count, rollback_count, restart_offset, commit_position, "
    "start_time, end_time, failure_cause"
)


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SqliteExecutionRepository:
    """Execution repository stored in a SQLite database.

    A single connection is shared and guarded by a lock; every write runs
    in its own transaction.

    Args:
        path: Database file, or ``":memory:"`` for a private in-memory database.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.execute("PRAGMA foreign_keys = ON")
        with self._conn:
            self._conn.executescript(_SCHEMA)

    # ------------------------------------------------------------------
    # Job executions
    # ------------------------------------------------------------------

    def create_execution(
        self,
        job_name: str,
        run_id: str,
        restarted_from: str | None = None,
    ) -> JobExecution:
        execution = JobExecution(job_name=job_name, run_id=run_id, restarted_from=restarted_from)
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        f"INSERT INTO batch_job_execution ({_JOB_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            execution.execution_id,
                            job_name,
                            run_id,
                            execution.status.value,
                            _ts(execution.create_time),
                            None,
                            None,
                            None,
                            restarted_from,
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                row = self._conn.execute(
                    "SELECT status FROM batch_job_execution WHERE job_name = ? AND run_id = ?",
                    (job_name, run_id),
                ).fetchone()
                raise DuplicateRunError(job_name, run_id, row[0] if row else None) from exc
        logger.debug("Created execution %s for job '%s' run_id=%s", execution.execution_id, job_name, run_id)
        return execution

    def update_status(
        self,
        execution_id: str,
        status: BatchStatus,
        cause: str | None = None,
    ) -> JobExecution:
        with self._lock:
            row = self._conn.execute(
                "SELECT status FROM batch_job_execution WHERE execution_id = ?",
                (execution_id,),
            ).fetchone()
            if row is None:
                raise JobExecutionNotFoundError(f"execution_id={execution_id!r}")
            validate_transition(BatchStatus(row[0]), status)

            assignments = ["status = ?"]
            params: list[Any] = [status.value]
            if status is BatchStatus.STARTED:
                assignments.append("start_time = ?")
                params.append(_ts(utcnow()))
            if status.is_terminal:
                assignments.append("end_time = ?")
                params.append(_ts(utcnow()))
            if cause is not None:
                assignments.append("failure_cause = ?")
                params.append(cause)
            params.append(execution_id)
            with self._conn:
                self._conn.execute(
                    f"UPDATE batch_job_execution SET {', '.join(assignments)} WHERE execution_id = ?",
                    params,
                )
            execution = self._load_by_id(execution_id)
        if execution is None:
            raise JobExecutionNotFoundError(f"execution_id={execution_id!r}")
        return execution

    def get_execution(self, job_name: str, run_id: str) -> JobExecution | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_JOB_COLUMNS} FROM batch_job_execution WHERE job_name = ? AND run_id = ?",
                (job_name, run_id),
            ).fetchone()
            return self._hydrate(row) if row is not None else None

    def get_execution_by_id(self, execution_id: str) -> JobExecution | None:
        with self._lock:
            return self._load_by_id(execution_id)

    def list_executions(self, job_name: str) -> list[JobExecution]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_JOB_COLUMNS} FROM batch_job_execution WHERE job_name = ? ORDER BY create_time, rowid",
                (job_name,),
            ).fetchall()
            return [self._hydrate(row) for row in rows]

    def get_last_execution(self, job_name: str) -> JobExecution | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_JOB_COLUMNS} FROM batch_job_execution WHERE job_name = ? "
                "ORDER BY create_time DESC, rowid DESC LIMIT 1",
                (job_name,),
            ).fetchone()
            return self._hydrate(row) if row is not None else None

    # ------------------------------------------------------------------
    # Step executions
    # ------------------------------------------------------------------

    def add_step_execution(self, execution_id: str, step: StepExecution) -> StepExecution:
        with self._lock:
            exists = self._conn.execute(
                "SELECT 1 FROM batch_job_execution WHERE execution_id = ?",
                (execution_id,),
            ).fetchone()
            if exists is None:
                raise JobExecutionNotFoundError(f"execution_id={execution_id!r}")
            (seq,) = self._conn.execute(
                "SELECT COUNT(*) FROM batch_step_execution WHERE execution_id = ?",
                (execution_id,),
            ).fetchone()
            step.job_execution_id = execution_id
            with self._conn:
                self._conn.execute(
                    f"INSERT INTO batch_step_execution ({_STEP_COLUMNS}, seq) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (*self._step_values(step), seq),
                )
        return step

    def update_step_execution(self, step: StepExecution) -> None:
        with self._lock:
            with self._conn:
                cursor = self._conn.execute(
                    """
                    UPDATE batch_step_execution SET
                        status = ?, read_count = ?, write_count = ?, skip_count = ?,
                        discard_count = ?, commit_count = ?, rollback_count = ?,
                        restart_offset = ?, commit_position = ?,
                        start_time = ?, end_time = ?, failure_cause = ?
                    WHERE step_execution_id = ?
                    """,
                    (*self._step_values(step)[3:], step.step_execution_id),
                )
            if cursor.rowcount == 0:
                raise JobExecutionNotFoundError(f"step_execution_id={step.step_execution_id!r}")

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _step_values(step: StepExecution) -> tuple[Any, ...]:
        return (
            step.step_execution_id,
            step.job_execution_id,
            step.step_name,
            step.status.value,
            step.read_count,
            step.write_count,
            step.skip_count,
            step.discard_count,
            step.commit_count,
            step.rollback_count,
            step.restart_offset,
            step.commit_position,
            _ts(step.start_time),
            _ts(step.end_time),
            step.failure_cause,
        )

    def _load_by_id(self, execution_id: str) -> JobExecution | None:
        row = self._conn.execute(
            f"SELECT {_JOB_COLUMNS} FROM batch_job_execution WHERE execution_id = ?",
            (execution_id,),
        ).fetchone()
        return self._hydrate(row) if row is not None else None

    def _hydrate(self, row: tuple[Any, ...]) -> JobExecution:
        execution = JobExecution(
            execution_id=row[0],
            job_name=row[1],
            run_id=row[2],
            status=BatchStatus(row[3]),
            create_time=_parse_ts(row[4]) or utcnow(),
            start_time=_parse_ts(row[5]),
            end_time=_parse_ts(row[6]),
            failure_cause=row[7],
            restarted_from=row[8],
        )
        step_rows = self._conn.execute(
            f"SELECT {_STEP_COLUMNS} FROM batch_step_execution WHERE execution_id = ? ORDER BY seq",
            (execution.execution_id,),
        ).fetchall()
        execution.step_executions = [
            StepExecution(
                step_execution_id=s[0],
                job_execution_id=s[1],
                step_name=s[2],
                status=BatchStatus(s[3]),
                read_count=s[4],
                write_count=s[5],
                skip_count=s[6],
                discard_count=s[7],
                commit_count=s[8],
                rollback_count=s[9],
                restart_offset=s[10],
                commit_position=s[11],
                start_time=_parse_ts(s[12]),
                end_time=_parse_ts(s[13]),
                failure_cause=s[14],
            )
            for s in step_rows
        ]
        return execution
