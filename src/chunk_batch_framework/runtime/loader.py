"""Dynamic loading of sources, processors and sinks by class path."""

from __future__ import annotations

import importlib
import logging
from typing import Any, TypeVar

from chunk_batch_framework.core.config.step import ComponentRef
from chunk_batch_framework.runtime.exceptions import ComponentInstantiationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_class(class_path: str, base: type[T]) -> type[T]:
    """Dynamically load a subclass of *base* by its fully-qualified path.

    Args:
        class_path: Dotted path such as ``"my_package.readers.PeopleCsv"``.
        base: Required base class, e.g. ``RecordSource``.

    Returns:
        The loaded class (not an instance).

    Raises:
        ComponentInstantiationError: If the path is malformed, the module cannot
            be imported, the attribute does not exist, or it is not a
            subclass of *base*.
    """
    parts = class_path.rsplit(".", 1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ComponentInstantiationError(
            class_path,
            ValueError(f"Invalid class path format: '{class_path}' (expected 'module.ClassName')"),
        )

    module_path, class_name = parts

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ComponentInstantiationError(class_path, exc) from exc

    try:
        cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ComponentInstantiationError(class_path, exc) from exc

    if not isinstance(cls, type):
        raise ComponentInstantiationError(
            class_path,
            TypeError(f"'{class_name}' is not a class"),
        )

    if not issubclass(cls, base):
        raise ComponentInstantiationError(
            class_path,
            TypeError(f"'{class_name}' is not a {base.__name__} subclass"),
        )

    return cls


def instantiate(ref: ComponentRef, base: type[T]) -> T:
    """Create an instance from a :class:`ComponentRef`.

    Uses ``from_config(ref.config)`` if the class provides it,
    otherwise falls back to ``cls(**ref.config)``.

    Raises:
        ComponentInstantiationError: If loading or instantiation fails.
    """
    cls = load_class(ref.class_path, base)

    try:
        factory: Any = getattr(cls, "from_config", None)
        if factory is not None and callable(factory):
            instance = factory(dict(ref.config))
        else:
            instance = cls(**ref.config)
    except Exception as exc:
        raise ComponentInstantiationError(ref.class_path, exc) from exc

    logger.debug("Instantiated %s from '%s'", type(instance).__name__, ref.class_path)
    return instance  # type: ignore[no-any-return]


def validate_class(class_path: str, base: type[Any]) -> list[str]:
    """Validate a component class and return any warnings.

    Returns:
        A list of warning messages. Empty means the class is valid with no
        concerns.

    Raises:
        ComponentInstantiationError: If the class cannot be loaded at all.
    """
    cls = load_class(class_path, base)
    warnings: list[str] = []

    abstract_methods: frozenset[str] = getattr(cls, "__abstractmethods__", frozenset())
    if abstract_methods:
        warnings.append(f"'{class_path}' has unimplemented abstract methods: {', '.join(sorted(abstract_methods))}")

    return warnings
