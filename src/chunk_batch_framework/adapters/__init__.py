"""Ready-made record sources and sinks."""

from chunk_batch_framework.adapters.csv_source import DelimitedFileSource
from chunk_batch_framework.adapters.memory import IterableSource, ListSink
from chunk_batch_framework.adapters.sqlite_sink import SqliteBatchSink

__all__ = [
    "DelimitedFileSource",
    "IterableSource",
    "ListSink",
    "SqliteBatchSink",
]
