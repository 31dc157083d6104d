"""Runtime helpers: building sources, processors and sinks from configuration."""

from chunk_batch_framework.runtime.exceptions import ComponentInstantiationError
from chunk_batch_framework.runtime.loader import instantiate, load_class, validate_class

__all__ = [
    "ComponentInstantiationError",
    "instantiate",
    "load_class",
    "validate_class",
]
