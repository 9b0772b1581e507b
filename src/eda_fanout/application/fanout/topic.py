"""Application fanout – Topic.

One published event becomes one independent message per subscribed queue.
Deliveries run concurrently and each retries on its own, so a subscriber
that is down never delays or fails delivery to the others.
"""
from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from eda_fanout.kernel.messaging import DurableQueue, MessageId
from eda_fanout.observability.logging import get_logger
from eda_fanout.resilience.retry import RetryPolicy

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class DeliveryOutcome:
    """Result of delivering one event to one subscriber queue."""

    queue: str
    message_id: MessageId | None = None
    attempts: int = 0
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.message_id is not None


@dataclasses.dataclass(frozen=True)
class PublishResult:
    """Per-subscriber outcomes of one ``Topic.publish`` call."""

    topic: str
    event_id: str
    outcomes: tuple[DeliveryOutcome, ...] = ()

    @property
    def delivered(self) -> tuple[DeliveryOutcome, ...]:
        return tuple(o for o in self.outcomes if o.delivered)

    @property
    def failed(self) -> tuple[DeliveryOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.delivered)

    @property
    def all_delivered(self) -> bool:
        return not self.failed

    def outcome_for(self, queue: str) -> DeliveryOutcome | None:
        for outcome in self.outcomes:
            if outcome.queue == queue:
                return outcome
        return None


class Topic:
    """Fan-out point over a set of subscriber queues keyed by queue name.

    Parameters
    ----------
    name:
        Topic identity, added to every message as the ``topic`` attribute.
    retry_policy:
        Retry applied to each subscriber enqueue independently. Defaults to
        three attempts with exponential backoff on ``InfrastructureError``.
    """

    def __init__(self, name: str, retry_policy: RetryPolicy | None = None) -> None:
        self.name = name
        self._retry = retry_policy or RetryPolicy(max_attempts=3)
        self._subscribers: dict[str, DurableQueue] = {}

    def subscribe(self, queue: DurableQueue) -> bool:
        """Register *queue*; returns ``False`` if a queue with that name is already subscribed."""
        if queue.name in self._subscribers:
            return False
        self._subscribers[queue.name] = queue
        logger.info("queue_subscribed", topic=self.name, queue=queue.name)
        return True

    def unsubscribe(self, queue_name: str) -> bool:
        removed = self._subscribers.pop(queue_name, None) is not None
        if removed:
            logger.info("queue_unsubscribed", topic=self.name, queue=queue_name)
        return removed

    @property
    def subscribers(self) -> tuple[str, ...]:
        return tuple(self._subscribers)

    def __contains__(self, queue_name: object) -> bool:
        return queue_name in self._subscribers

    async def publish(self, event: Any, attributes: Mapping[str, str] | None = None) -> PublishResult:
        """Deliver *event* to every subscriber and report each outcome.

        Never raises for a delivery failure; inspect ``PublishResult.failed``.
        """
        event_id = str(uuid4())
        attrs = {**(attributes or {}), "topic": self.name, "event_id": event_id}
        queues = list(self._subscribers.values())
        outcomes = await asyncio.gather(*(self._deliver(q, event, attrs) for q in queues))
        result = PublishResult(topic=self.name, event_id=event_id, outcomes=tuple(outcomes))
        logger.info(
            "event_published",
            topic=self.name,
            event_id=event_id,
            delivered=len(result.delivered),
            failed=len(result.failed),
        )
        return result

    async def _deliver(self, queue: DurableQueue, event: Any, attributes: dict[str, str]) -> DeliveryOutcome:
        attempts = 0

        async def _enqueue() -> MessageId:
            nonlocal attempts
            attempts += 1
            return await queue.enqueue(event, dict(attributes))

        try:
            message_id = await self._retry.execute_async(_enqueue)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "delivery_failed",
                topic=self.name,
                queue=queue.name,
                attempts=attempts,
                error=repr(exc),
            )
            return DeliveryOutcome(queue=queue.name, attempts=attempts, error=repr(exc))
        return DeliveryOutcome(queue=queue.name, message_id=message_id, attempts=attempts)


__all__ = ["DeliveryOutcome", "PublishResult", "Topic"]
