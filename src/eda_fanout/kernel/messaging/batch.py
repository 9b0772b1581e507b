"""Kernel messaging – Batch, handler result and handler signature."""
from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum
from typing import Any
from uuid import uuid4

from eda_fanout.kernel.messaging.message import Message, MessageId


class Outcome(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    PARTIAL = "partial"


@dataclasses.dataclass(frozen=True)
class Batch:
    """Up to ``max_batch_size`` in-flight messages drawn from one queue."""

    queue: str
    messages: tuple[Message, ...]
    id: str = dataclasses.field(default_factory=lambda: str(uuid4()))

    @property
    def bodies(self) -> list[Any]:
        return [m.body for m in self.messages]

    @property
    def message_ids(self) -> tuple[MessageId, ...]:
        return tuple(m.id for m in self.messages)

    def __len__(self) -> int:
        return len(self.messages)


@dataclasses.dataclass(frozen=True)
class HandlerResult:
    """What a handler reports back for one batch.

    Returning ``None`` from a handler is the same as ``HandlerResult.success()``.
    ``completed`` is only read for ``Outcome.PARTIAL``.
    """

    outcome: Outcome
    completed: frozenset[MessageId] = frozenset()
    reason: str | None = None

    @classmethod
    def success(cls) -> HandlerResult:
        return cls(Outcome.SUCCESS)

    @classmethod
    def failure(cls, reason: str | None = None) -> HandlerResult:
        return cls(Outcome.FAILURE, reason=reason)

    @classmethod
    def partial(cls, completed: Iterable[MessageId], reason: str | None = None) -> HandlerResult:
        return cls(Outcome.PARTIAL, completed=frozenset(completed), reason=reason)


#: A batch handler: sync or async callable taking a ``Batch``.
BatchHandler = Callable[[Batch], HandlerResult | None | Awaitable[HandlerResult | None]]

__all__ = ["Batch", "BatchHandler", "HandlerResult", "Outcome"]
