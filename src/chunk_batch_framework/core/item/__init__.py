"""Item contracts: sources, processors, sinks, validators and their errors."""

from chunk_batch_framework.core.item.base import (
    ItemProcessor,
    ProcessResult,
    RecordSink,
    RecordSource,
    SkippedItem,
)
from chunk_batch_framework.core.item.exceptions import (
    BatchError,
    ProcessingError,
    SinkError,
    SourceError,
    StepError,
)
from chunk_batch_framework.core.item.processors import (
    CompositeItemProcessor,
    FunctionItemProcessor,
    PassThroughItemProcessor,
    ValidatingItemProcessor,
)
from chunk_batch_framework.core.item.protocols import ConfigurableInstance, Resource
from chunk_batch_framework.core.item.validation import (
    CompositeValidator,
    PredicateValidator,
    ValidationOutcome,
    Validator,
)

__all__ = [
    "BatchError",
    "CompositeItemProcessor",
    "CompositeValidator",
    "ConfigurableInstance",
    "FunctionItemProcessor",
    "ItemProcessor",
    "PassThroughItemProcessor",
    "PredicateValidator",
    "ProcessResult",
    "ProcessingError",
    "RecordSink",
    "RecordSource",
    "Resource",
    "SinkError",
    "SkippedItem",
    "SourceError",
    "StepError",
    "ValidatingItemProcessor",
    "ValidationOutcome",
    "Validator",
]
