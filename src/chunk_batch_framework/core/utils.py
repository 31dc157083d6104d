"""Shared utility functions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any


def safe_call(
    fn: Callable[[], None],
    call_logger: logging.Logger,
    message: str,
    *message_args: Any,
) -> None:
    """Invoke *fn*, logging any exception as a warning instead of raising it.

    Use this to call listeners, resource ``close()`` methods, or other
    extension points where a failure must not change the outcome of a job.

    Args:
        fn: Zero-argument callable to invoke.
        call_logger: Logger instance for warning output.
        message: Log message template (``%s``-style).
        *message_args: Arguments interpolated into *message*.
    """
    try:
        fn()
    except Exception:
        call_logger.warning(message, *message_args, exc_info=True)


def call_optional(
    target: object,
    method: str,
    call_logger: logging.Logger,
    *args: Any,
) -> None:
    """Call ``target.method(*args)`` if *target* defines it.

    Listeners only implement the hooks they care about; a missing method is a
    no-op. Errors raised by the hook are logged via :func:`safe_call`.
    """
    hook = getattr(target, method, None)
    if hook is None or not callable(hook):
        return
    safe_call(
        lambda: hook(*args),
        call_logger,
        "Listener %s.%s raised an exception",
        type(target).__name__,
        method,
    )
