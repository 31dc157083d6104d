"""Item component protocols for structural typing."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class ConfigurableInstance(Protocol[T_co]):
    """Protocol for sources, processors and sinks built from configuration.

    Classes implementing this protocol are instantiated by the runtime
    loader through ``from_config`` instead of ``cls(**config)``.

    Example::

        class PeopleCsv(DelimitedFileSource):
            @classmethod
            def from_config(cls, config: dict[str, Any]) -> PeopleCsv:
                return cls(path=config["path"], field_names=PEOPLE_FIELDS)
    """

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> T_co:
        """Create an instance from a configuration dict."""
        ...


@runtime_checkable
class Resource(Protocol):
    """Protocol for sources and sinks that manage external resources.

    The chunk executor calls :meth:`open` before the first read and
    :meth:`close` in a ``finally`` block once the step ends, so file
    handles and connections are released even when the step fails.

    Example::

        class DbSink(RecordSink[Row]):
            def open(self) -> None:
                self._conn = sqlite3.connect(self._path)

            def close(self) -> None:
                self._conn.close()
    """

    def open(self) -> None:
        """Acquire external resources before the step starts."""
        ...

    def close(self) -> None:
        """Release external resources after the step ends."""
        ...
