"""Delimited flat-file record source."""

from __future__ import annotations

import csv
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

from chunk_batch_framework.core.item.base import RecordSource

logger = logging.getLogger(__name__)


class DelimitedFileSource(RecordSource[dict[str, str]]):
    """Reads a delimited text file, mapping each line's columns to named fields.

    Every record is a ``dict`` keyed by *field_names*. A line whose column
    count differs from ``len(field_names)`` is malformed and fails the
    step. Blank lines are ignored. The file is opened by :meth:`open` and
    closed by :meth:`close`.

    Args:
        path: File to read.
        field_names: Column names, in file order.
        delimiter: Column separator (default: ``","``).
        skip_header: Ignore the first line (default: ``False``).
        encoding: File encoding (default: ``"utf-8"``).
    """

    def __init__(
        self,
        path: str | Path,
        field_names: Sequence[str],
        delimiter: str = ",",
        skip_header: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        if not field_names:
            raise ValueError("field_names must not be empty")
        self._path = Path(path)
        self._field_names = tuple(field_names)
        self._delimiter = delimiter
        self._skip_header = skip_header
        self._encoding = encoding
        self._file: IO[str] | None = None
        self._reader: Any = None

    @property
    def name(self) -> str:
        return str(self._path)

    def open(self) -> None:
        self._file = self._path.open("r", encoding=self._encoding, newline="")
        self._reader = csv.reader(self._file, delimiter=self._delimiter)
        if self._skip_header:
            next(self._reader, None)
        logger.debug("Opened %s", self._path)

    def read(self) -> dict[str, str] | None:
        if self._reader is None:
            raise RuntimeError(f"Source '{self.name}' is not open")
        for row in self._reader:
            if not row or all(not column.strip() for column in row):
                continue
            if len(row) != len(self._field_names):
                raise ValueError(
                    f"{self._path}:{self._reader.line_num}: expected {len(self._field_names)} column(s), got {len(row)}"
                )
            return dict(zip(self._field_names, row))
        return None

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
        self._file = None
        self._reader = None
