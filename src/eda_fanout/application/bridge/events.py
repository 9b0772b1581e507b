"""Application bridge – ObjectCreatedEvent and S3-style notification parsing."""
from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime
from typing import Any
from urllib.parse import unquote_plus

from eda_fanout.kernel.errors import SerializationError
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)

_CREATED_PREFIX = "ObjectCreated:"


@dataclasses.dataclass(frozen=True)
class ObjectCreatedEvent:
    """Normalized "object created" event published on the topic."""

    source: str
    bucket: str
    key: str
    event_time: datetime
    event_name: str = "ObjectCreated:Put"
    size: int | None = None
    etag: str | None = None

    @property
    def location(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["event_time"] = self.event_time.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ObjectCreatedEvent:
        try:
            event_time = data["event_time"]
            if isinstance(event_time, str):
                event_time = datetime.fromisoformat(event_time)
            return cls(
                source=data["source"],
                bucket=data["bucket"],
                key=data["key"],
                event_time=event_time,
                event_name=data.get("event_name", "ObjectCreated:Put"),
                size=data.get("size"),
                etag=data.get("etag"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SerializationError(
                f"Not an ObjectCreatedEvent: {exc}", payload_type=type(data).__name__, cause=exc
            ) from exc

    @classmethod
    def coerce(cls, body: Any) -> ObjectCreatedEvent:
        """Accept an event, its dict form, or its JSON text (as returned by networked queues)."""
        if isinstance(body, cls):
            return body
        if isinstance(body, (str, bytes)):
            try:
                body = json.loads(body)
            except json.JSONDecodeError as exc:
                raise SerializationError("Message body is not JSON", payload_type="str", cause=exc) from exc
        if isinstance(body, dict):
            return cls.from_dict(body)
        raise SerializationError("Unsupported message body", payload_type=type(body).__name__)


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not value:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _parse_record(record: dict[str, Any]) -> ObjectCreatedEvent | None:
    event_name = str(record.get("eventName", ""))
    name = event_name.removeprefix("s3:")
    if not name.startswith(_CREATED_PREFIX):
        logger.debug("notification_record_skipped", event_name=event_name)
        return None
    s3 = record["s3"]
    obj = s3["object"]
    size = obj.get("size")
    return ObjectCreatedEvent(
        source=str(record.get("eventSource", "aws:s3")),
        bucket=s3["bucket"]["name"],
        key=unquote_plus(obj["key"]),
        event_time=_parse_time(record.get("eventTime")),
        event_name=name,
        size=int(size) if size is not None else None,
        etag=obj.get("eTag"),
    )


def parse_notification(notification: Any) -> list[ObjectCreatedEvent]:
    """Normalize one storage notification document into zero or more events.

    Accepts the ``{"Records": [...]}`` document (as a dict, JSON text or
    bytes) or an ``ObjectCreatedEvent``. Test events and records that are not
    ``ObjectCreated:*`` yield nothing; malformed records are logged and
    skipped. Raises ``SerializationError`` when the document itself cannot be
    read.
    """
    if isinstance(notification, ObjectCreatedEvent):
        return [notification]
    if isinstance(notification, (str, bytes)):
        try:
            notification = json.loads(notification)
        except json.JSONDecodeError as exc:
            raise SerializationError(
                "Notification is not valid JSON", payload_type=type(notification).__name__, cause=exc
            ) from exc
    if not isinstance(notification, dict):
        raise SerializationError("Unsupported notification", payload_type=type(notification).__name__)
    if notification.get("Event") == "s3:TestEvent":
        return []
    records = notification.get("Records")
    if not isinstance(records, list):
        raise SerializationError("Notification has no 'Records' list", payload_type="dict")

    events: list[ObjectCreatedEvent] = []
    for index, record in enumerate(records):
        try:
            event = _parse_record(record)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("notification_record_malformed", index=index, error=repr(exc))
            continue
        if event is not None:
            events.append(event)
    return events


__all__ = ["ObjectCreatedEvent", "parse_notification"]
