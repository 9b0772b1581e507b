"""Kernel messaging – DurableQueue port."""
from __future__ import annotations

import abc
from collections.abc import Mapping
from typing import Any

from eda_fanout.kernel.messaging.message import Message, MessageId, QueueStats


class DurableQueue(abc.ABC):
    """Port: at-least-once queue with claim / visibility / ack semantics.

    Every backend (in-memory for tests, SQS in production) must honour the
    same contract:

    * ``enqueue`` assigns a fresh id; the message is visible immediately.
    * ``dequeue_batch`` claims up to ``max_count`` messages, waiting at most
      ``max_wait`` seconds; it returns ``[]`` when the window passes with
      nothing available.  Claimed messages stay hidden until acked, nacked or
      their visibility deadline passes.
    * ``ack`` is idempotent; unknown ids are ignored.
    * ``nack`` releases a claim immediately.
    """

    name: str

    @abc.abstractmethod
    async def enqueue(self, body: Any, attributes: Mapping[str, str] | None = None) -> MessageId: ...

    @abc.abstractmethod
    async def dequeue_batch(self, max_count: int, max_wait: float) -> list[Message]: ...

    @abc.abstractmethod
    async def ack(self, message_id: MessageId) -> None: ...

    @abc.abstractmethod
    async def nack(self, message_id: MessageId) -> None: ...

    @abc.abstractmethod
    async def stats(self) -> QueueStats: ...


__all__ = ["DurableQueue"]
