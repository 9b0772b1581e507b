"""Application bridge – EventSourceBridge."""
from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from eda_fanout.application.bridge.events import ObjectCreatedEvent, parse_notification
from eda_fanout.application.fanout import PublishResult, Topic
from eda_fanout.kernel.errors import BaseError
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)

NotificationListener = Callable[[Any], Awaitable[None]]


@runtime_checkable
class ChangeNotificationSource(Protocol):
    """Port: upstream producer of storage change notifications."""

    def add_listener(self, listener: NotificationListener) -> None: ...


class EventSourceBridge:
    """Couples a storage change-notification stream to a ``Topic``.

    Every ``ObjectCreated`` record becomes one ``ObjectCreatedEvent`` published
    on the topic. No deduplication happens here: the upstream delivers at
    least once, and a repeated notification is published again.

    Parameters
    ----------
    topic:
        Destination topic.
    source_name:
        Overrides ``ObjectCreatedEvent.source`` when set (e.g. the bucket's
        logical name).
    """

    def __init__(self, topic: Topic, source_name: str | None = None) -> None:
        self._topic = topic
        self._source_name = source_name
        self.published = 0
        self.rejected = 0

    @property
    def topic(self) -> Topic:
        return self._topic

    def attach(self, source: ChangeNotificationSource) -> None:
        """Register :meth:`notify` as listener on *source*."""
        source.add_listener(self.notify)

    async def notify(self, notification: Any) -> None:
        """Upstream contract: accept a notification and never raise."""
        try:
            await self.handle(notification)
        except BaseError as exc:
            self.rejected += 1
            logger.warning("notification_rejected", error=exc.to_dict())
        except Exception:  # noqa: BLE001
            self.rejected += 1
            logger.exception("notification_failed")

    async def handle(self, notification: Any) -> list[PublishResult]:
        """Publish every created object in *notification*; returns one result per event."""
        results: list[PublishResult] = []
        for event in parse_notification(notification):
            event = self._rename(event)
            result = await self._topic.publish(
                event,
                attributes={"event_name": event.event_name, "bucket": event.bucket},
            )
            self.published += 1
            if not result.all_delivered:
                logger.warning(
                    "event_partially_delivered",
                    key=event.key,
                    failed=[o.queue for o in result.failed],
                )
            results.append(result)
        return results

    def _rename(self, event: ObjectCreatedEvent) -> ObjectCreatedEvent:
        if self._source_name is None or event.source == self._source_name:
            return event
        return dataclasses.replace(event, source=self._source_name)


__all__ = ["ChangeNotificationSource", "EventSourceBridge", "NotificationListener"]
