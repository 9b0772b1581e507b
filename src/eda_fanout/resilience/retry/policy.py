"""Resilience – RetryPolicy backed by ``tenacity``."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import tenacity

from eda_fanout.kernel.errors import InfrastructureError
from eda_fanout.resilience.retry.backoff import BackoffStrategy, ExponentialBackoff, FullJitter, JitterStrategy

T = TypeVar("T")
logger = logging.getLogger(__name__)


class RetryPolicy:
    """Bounded retry with backoff for transient backend failures.

    Only ``retryable_exceptions`` are retried (``InfrastructureError`` by
    default); anything else, and the last failure once ``max_attempts`` is
    exhausted, propagates unchanged.

    Parameters
    ----------
    sleep:
        Optional async sleep used between attempts. Tests pass a no-op to
        avoid real waiting.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: BackoffStrategy | None = None,
        jitter: JitterStrategy | None = None,
        retryable_exceptions: tuple[type[BaseException], ...] = (InfrastructureError,),
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.backoff = backoff or ExponentialBackoff()
        self.jitter = jitter or FullJitter()
        self.retryable_exceptions = retryable_exceptions
        self._sleep = sleep

    def _wait(self, retry_state: tenacity.RetryCallState) -> float:
        return self.jitter.apply(self.backoff.compute(retry_state.attempt_number))

    @staticmethod
    def _log_retry(retry_state: tenacity.RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.debug("retry attempt=%d delay=%.2fs exc=%r", retry_state.attempt_number, delay, exc)

    def _build(self) -> tenacity.AsyncRetrying:
        kwargs: dict[str, Any] = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=tenacity.retry_if_exception_type(self.retryable_exceptions),
            before_sleep=self._log_retry,
            reraise=True,
            **kwargs,
        )

    async def execute_async(self, func: Callable[[], Awaitable[T]]) -> T:
        """Await *func()* with retry."""
        async for attempt in self._build():
            with attempt:
                result = await func()
        return result  # type: ignore[possibly-undefined]


async def no_sleep(_: float) -> None:
    """Sleep replacement for tests."""


__all__ = ["RetryPolicy", "no_sleep"]
