"""Kernel messaging – dead-letter sink port."""
from __future__ import annotations

import abc
import dataclasses
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


@dataclasses.dataclass(frozen=True)
class DeadLetterEntry:
    """A message removed from its queue after too many deliveries."""

    id: str = dataclasses.field(default_factory=lambda: str(uuid4()))
    message_id: str = ""
    queue: str = ""
    body: Any = None
    attributes: dict[str, str] = dataclasses.field(default_factory=dict)
    delivery_count: int = 0
    reason: str = ""
    failed_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))


class DeadLetterSink(abc.ABC):
    """Port: terminal destination for poison messages."""

    @abc.abstractmethod
    async def push(self, entry: DeadLetterEntry) -> None:
        """Record *entry*. Called at most once per dead-lettered message."""
        ...


__all__ = ["DeadLetterEntry", "DeadLetterSink"]
