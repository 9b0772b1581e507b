"""Resilience – retry with configurable backoff and jitter strategies."""
from eda_fanout.resilience.retry.backoff import (
    BackoffStrategy,
    ConstantBackoff,
    ExponentialBackoff,
    FullJitter,
    JitterStrategy,
    NoJitter,
)
from eda_fanout.resilience.retry.policy import RetryPolicy, no_sleep

__all__ = [
    "BackoffStrategy", "ConstantBackoff", "ExponentialBackoff", "FullJitter",
    "JitterStrategy", "NoJitter", "RetryPolicy", "no_sleep",
]
