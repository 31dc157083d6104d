"""Sample domain: importing people from a CSV file into a database.

The job reads ``name,age,nation,address`` lines, rejects people whose name
length or age is out of range, replaces the nation with a category code
and writes the result to SQLite. See ``examples/people_import.conf``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from chunk_batch_framework.adapters.csv_source import DelimitedFileSource
from chunk_batch_framework.adapters.sqlite_sink import SqliteBatchSink
from chunk_batch_framework.core.item.processors import ValidatingItemProcessor
from chunk_batch_framework.core.item.validation import CompositeValidator, PredicateValidator

PERSON_FIELDS = ("name", "age", "nation", "address")

PERSON_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS person (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    name    TEXT NOT NULL,
    age     INTEGER NOT NULL,
    nation  TEXT NOT NULL,
    address TEXT
);
"""

PERSON_INSERT_SQL = "INSERT INTO person (name, age, nation, address) VALUES (:name, :age, :nation, :address)"

R = TypeVar("R")


@dataclass(frozen=True)
class Person:
    name: str
    age: int
    nation: str
    address: str


class PeopleCsvSource(DelimitedFileSource):
    """Reads :class:`Person` records from a ``name,age,nation,address`` file."""

    def read(self) -> Person | None:  # type: ignore[override]
        row = super().read()
        if row is None:
            return None
        return Person(
            name=row["name"].strip(),
            age=int(row["age"]),
            nation=row["nation"].strip(),
            address=row["address"].strip(),
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> PeopleCsvSource:
        return cls(
            path=config["path"],
            field_names=PERSON_FIELDS,
            delimiter=config.get("delimiter", ","),
            skip_header=config.get("skip_header", False),
            encoding=config.get("encoding", "utf-8"),
        )


class PersonValidator(CompositeValidator[Person]):
    """Accepts people with a name of ``min_name_length..max_name_length``
    characters and a non-negative age."""

    def __init__(self, min_name_length: int = 2, max_name_length: int = 4) -> None:
        super().__init__(
            PredicateValidator(
                lambda p: min_name_length <= len(p.name) <= max_name_length,
                lambda p: f"name {p.name!r} must be {min_name_length}-{max_name_length} characters",
            ),
            PredicateValidator(
                lambda p: p.age >= 0,
                lambda p: f"age {p.age} must not be negative",
            ),
        )


class CategoryCodeTransform(Generic[R]):
    """Replaces one field with *match_code* when it equals *match*, else *default_code*.

    Works on dataclass instances and dicts and never mutates its input.
    """

    def __init__(self, field: str, match: str, match_code: str = "01", default_code: str = "02") -> None:
        self.field = field
        self.match = match
        self.match_code = match_code
        self.default_code = default_code

    def code_for(self, value: Any) -> str:
        return self.match_code if value == self.match else self.default_code

    def __call__(self, item: R) -> R:
        if isinstance(item, dict):
            return {**item, self.field: self.code_for(item[self.field])}  # type: ignore[return-value]
        value = getattr(item, self.field)
        return dataclasses.replace(item, **{self.field: self.code_for(value)})  # type: ignore[type-var]


class PeopleProcessor(ValidatingItemProcessor[Person, Person]):
    """Validates a person, then codes their nation."""

    def __init__(
        self,
        nation_match: str = "汉族",
        match_code: str = "01",
        default_code: str = "02",
        min_name_length: int = 2,
        max_name_length: int = 4,
    ) -> None:
        super().__init__(
            PersonValidator(min_name_length, max_name_length),
            CategoryCodeTransform("nation", nation_match, match_code, default_code),
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> PeopleProcessor:
        return cls(**config)


class PeopleSqliteSink(SqliteBatchSink):
    """Writes :class:`Person` records to the ``person`` table, creating it if needed."""

    def __init__(self, database: str) -> None:
        super().__init__(database, PERSON_INSERT_SQL, PERSON_TABLE_DDL)
