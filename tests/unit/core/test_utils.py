"""Tests for core.utils."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

from chunk_batch_framework.core.utils import call_optional, safe_call


class TestSafeCall:
    """Tests for safe_call."""

    def test_calls_function(self) -> None:
        fn = MagicMock()
        safe_call(fn, logging.getLogger("test"), "msg")
        fn.assert_called_once()

    def test_swallows_exception(self) -> None:
        """Exceptions from fn are caught, not re-raised."""
        fn = MagicMock(side_effect=RuntimeError("boom"))
        safe_call(fn, logging.getLogger("test"), "msg")

    def test_logs_warning_on_exception(self) -> None:
        mock_logger = MagicMock()
        fn = MagicMock(side_effect=ValueError("oops"))
        safe_call(fn, mock_logger, "Hook %s failed", "after_job")
        mock_logger.warning.assert_called_once_with("Hook %s failed", "after_job", exc_info=True)


class TestCallOptional:
    """Tests for call_optional."""

    def test_calls_defined_method(self) -> None:
        target = MagicMock()
        call_optional(target, "after_chunk", logging.getLogger("test"), 1, 2)
        target.after_chunk.assert_called_once_with(1, 2)

    def test_missing_method_is_noop(self) -> None:
        call_optional(object(), "after_chunk", logging.getLogger("test"))

    def test_non_callable_attribute_is_ignored(self) -> None:
        class Target:
            after_chunk = "not a hook"

        call_optional(Target(), "after_chunk", logging.getLogger("test"))

    def test_hook_error_is_logged(self) -> None:
        class Target:
            def before_job(self, execution: object) -> None:
                raise RuntimeError("boom")

        mock_logger = MagicMock()
        call_optional(Target(), "before_job", mock_logger, None)
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[1:] == ("Target", "before_job")
