"""Resilience patterns for chunk writes."""

from chunk_batch_framework.core.resilience.retry import RetryExecutor

__all__ = ["RetryExecutor"]
