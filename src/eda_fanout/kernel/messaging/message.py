"""Kernel messaging – queued message snapshot and queue statistics."""
from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from typing import Any, TypeAlias
from uuid import uuid4

MessageId: TypeAlias = str


def new_message_id() -> MessageId:
    return str(uuid4())


@dataclasses.dataclass(frozen=True)
class Message:
    """Immutable snapshot of a queued message.

    ``delivery_count`` starts at 0 and is incremented every time the message
    is claimed by ``dequeue_batch``. ``visible_at`` is the visibility deadline
    of the current claim; it is ``None`` while the message has never been
    dequeued or has been released back to the queue.
    """

    id: MessageId = dataclasses.field(default_factory=new_message_id)
    body: Any = None
    attributes: dict[str, str] = dataclasses.field(default_factory=dict)
    enqueued_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))
    delivery_count: int = 0
    visible_at: datetime | None = None

    @property
    def in_flight(self) -> bool:
        return self.visible_at is not None


@dataclasses.dataclass(frozen=True)
class QueueStats:
    """Point-in-time counters for one queue."""

    queue: str
    available: int = 0
    in_flight: int = 0
    dead_lettered: int = 0

    @property
    def total(self) -> int:
        return self.available + self.in_flight


__all__ = ["Message", "MessageId", "QueueStats", "new_message_id"]
