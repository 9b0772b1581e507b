"""Resilience – bounded retry for transient backend failures."""

from eda_fanout.resilience.retry import BackoffStrategy, JitterStrategy, RetryPolicy

__all__ = ["BackoffStrategy", "JitterStrategy", "RetryPolicy"]
