"""Testing fakes – FlakyQueue."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from eda_fanout.kernel.messaging import DurableQueue, Message, MessageId, QueueStats
from eda_fanout.testing.chaos import FailureInjector


class FlakyQueue(DurableQueue):
    """Wraps a queue and fails selected operations through ``FailureInjector``s.

    Usage::

        flaky = FlakyQueue(InMemoryQueue("mailer-queue"))
        flaky.enqueue_failures.fail_next(2)
    """

    def __init__(
        self,
        inner: DurableQueue,
        *,
        enqueue_failures: FailureInjector | None = None,
        dequeue_failures: FailureInjector | None = None,
        ack_failures: FailureInjector | None = None,
    ) -> None:
        self.inner = inner
        self.name = inner.name
        self.enqueue_failures = enqueue_failures or FailureInjector()
        self.dequeue_failures = dequeue_failures or FailureInjector()
        self.ack_failures = ack_failures or FailureInjector()

    @property
    def settings(self) -> Any:
        return getattr(self.inner, "settings", None)

    async def enqueue(self, body: Any, attributes: Mapping[str, str] | None = None) -> MessageId:
        self.enqueue_failures.check()
        return await self.inner.enqueue(body, attributes)

    async def dequeue_batch(self, max_count: int, max_wait: float) -> list[Message]:
        self.dequeue_failures.check()
        return await self.inner.dequeue_batch(max_count, max_wait)

    async def ack(self, message_id: MessageId) -> None:
        self.ack_failures.check()
        await self.inner.ack(message_id)

    async def nack(self, message_id: MessageId) -> None:
        await self.inner.nack(message_id)

    async def stats(self) -> QueueStats:
        return await self.inner.stats()


__all__ = ["FlakyQueue"]
