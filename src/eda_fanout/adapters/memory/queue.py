"""In-memory adapters – InMemoryQueue.

All table mutations happen synchronously between ``await`` points of a single
event loop, so a claim, ack, nack or expiry is atomic with respect to every
other consumer running on that loop.
"""
from __future__ import annotations

import asyncio
import contextlib
import dataclasses
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from eda_fanout.adapters.memory.dead_letter import InMemoryDeadLetterSink
from eda_fanout.config import QueueSettings
from eda_fanout.kernel.errors import ValidationError
from eda_fanout.kernel.messaging import (
    DeadLetterEntry,
    DeadLetterSink,
    DurableQueue,
    Message,
    MessageId,
    QueueStats,
)
from eda_fanout.kernel.time import Clock, SystemClock
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)


class InMemoryQueue(DurableQueue):
    """Durable-queue contract over an ordered ``dict`` of message snapshots.

    Visibility deadlines are computed from ``clock``; pass a ``FrozenClock``
    to expire claims in tests without sleeping. Waiting inside
    ``dequeue_batch`` uses real loop time and wakes up on every enqueue or
    release, or after ``poll_interval`` seconds to look for expired claims.
    A claim's visibility timeout starts when ``dequeue_batch`` returns, and
    claims held by a call that is still collecting never expire.
    """

    def __init__(
        self,
        name: str,
        settings: QueueSettings | None = None,
        *,
        dead_letter_sink: DeadLetterSink | None = None,
        clock: Clock | None = None,
        poll_interval: float = 0.05,
    ) -> None:
        self.name = name
        self.settings = settings or QueueSettings()
        self.dead_letter_sink: DeadLetterSink = dead_letter_sink or InMemoryDeadLetterSink()
        self._clock = clock or SystemClock()
        self._poll_interval = poll_interval
        self._messages: dict[MessageId, Message] = {}
        self._dead_lettered = 0
        self._changed = asyncio.Event()
        # Claimed by a dequeue_batch call that has not returned yet.
        self._collecting: set[MessageId] = set()

    async def enqueue(self, body: Any, attributes: Mapping[str, str] | None = None) -> MessageId:
        message = Message(body=body, attributes=dict(attributes or {}), enqueued_at=self._clock.now())
        self._messages[message.id] = message
        self._changed.set()
        logger.debug("message_enqueued", queue=self.name, message_id=message.id)
        return message.id

    async def dequeue_batch(self, max_count: int, max_wait: float) -> list[Message]:
        if max_count < 1:
            raise ValidationError(f"max_count must be >= 1, got {max_count}")
        if max_wait < 0:
            raise ValidationError(f"max_wait must be >= 0, got {max_wait}")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_wait
        claimed: list[Message] = []
        try:
            while True:
                self._changed.clear()
                await self._release_expired()
                fresh = self._claim(max_count - len(claimed))
                self._collecting.update(m.id for m in fresh)
                claimed.extend(fresh)
                remaining = deadline - loop.time()
                if len(claimed) >= max_count or remaining <= 0:
                    return self._restamp(claimed)
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(self._changed.wait(), timeout=min(remaining, self._poll_interval))
        finally:
            self._collecting.difference_update(m.id for m in claimed)

    async def ack(self, message_id: MessageId) -> None:
        if self._messages.pop(message_id, None) is not None:
            logger.debug("message_acked", queue=self.name, message_id=message_id)

    async def nack(self, message_id: MessageId) -> None:
        message = self._messages.get(message_id)
        if message is None or not message.in_flight:
            return
        await self._release(message, reason="nacked")

    async def stats(self) -> QueueStats:
        await self._release_expired()
        in_flight = sum(1 for m in self._messages.values() if m.in_flight)
        return QueueStats(
            queue=self.name,
            available=len(self._messages) - in_flight,
            in_flight=in_flight,
            dead_lettered=self._dead_lettered,
        )

    def snapshot(self) -> list[Message]:
        """Current messages in queue order, available and in-flight alike."""
        return list(self._messages.values())

    def __len__(self) -> int:
        return len(self._messages)

    # ------------------------------------------------------------------

    def _claim(self, count: int) -> list[Message]:
        if count <= 0:
            return []
        visible_at = self._clock.now() + timedelta(seconds=self.settings.visibility_timeout_seconds)
        claimed: list[Message] = []
        for message in self._messages.values():
            if len(claimed) >= count:
                break
            if message.in_flight:
                continue
            claimed.append(
                dataclasses.replace(message, delivery_count=message.delivery_count + 1, visible_at=visible_at)
            )
        for message in claimed:
            self._messages[message.id] = message
        return claimed

    def _restamp(self, claimed: list[Message]) -> list[Message]:
        """Start the visibility timeout of *claimed* at hand-out time."""
        visible_at = self._clock.now() + timedelta(seconds=self.settings.visibility_timeout_seconds)
        handed_out: list[Message] = []
        for message in claimed:
            if self._messages.get(message.id) is not message:
                continue
            message = dataclasses.replace(message, visible_at=visible_at)
            self._messages[message.id] = message
            handed_out.append(message)
        return handed_out

    async def _release_expired(self) -> None:
        now = self._clock.now()
        expired = [
            m
            for m in self._messages.values()
            if m.visible_at is not None and m.visible_at <= now and m.id not in self._collecting
        ]
        for message in expired:
            await self._release(message, reason="visibility timeout expired")

    async def _release(self, message: Message, reason: str) -> None:
        # The claim may have been acked or released while we were suspended.
        if self._messages.get(message.id) is not message:
            return
        limit = self.settings.dead_letter_max_deliveries
        if limit is not None and message.delivery_count >= limit:
            del self._messages[message.id]
            self._dead_lettered += 1
            await self.dead_letter_sink.push(
                DeadLetterEntry(
                    message_id=message.id,
                    queue=self.name,
                    body=message.body,
                    attributes=dict(message.attributes),
                    delivery_count=message.delivery_count,
                    reason=f"{reason} after {message.delivery_count} deliveries",
                )
            )
            return
        self._messages[message.id] = dataclasses.replace(message, visible_at=None)
        self._changed.set()
        logger.debug(
            "message_released",
            queue=self.name,
            message_id=message.id,
            delivery_count=message.delivery_count,
            reason=reason,
        )


__all__ = ["InMemoryQueue"]
