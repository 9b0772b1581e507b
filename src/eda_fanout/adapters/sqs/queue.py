"""SQS adapter – SqsQueue (requires 'aiobotocore' extra).

Claim, visibility and deletion are SQS's own ``ReceiveMessage`` /
``ChangeMessageVisibility`` / ``DeleteMessage`` primitives, so any number of
consumer processes may drain the same queue.
"""
from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from eda_fanout.adapters.memory.dead_letter import InMemoryDeadLetterSink
from eda_fanout.config import QueueSettings
from eda_fanout.kernel.errors import BackendUnavailableError, ValidationError
from eda_fanout.kernel.messaging import (
    DeadLetterEntry,
    DeadLetterSink,
    DurableQueue,
    JsonMessageSerializer,
    Message,
    MessageId,
    MessageSerializer,
    QueueStats,
)
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)

#: SQS limits for a single ReceiveMessage call.
_MAX_RECEIVE_COUNT = 10
_MAX_RECEIVE_WAIT = 20


def _require_aiobotocore() -> Any:  # pragma: no cover
    try:
        import aiobotocore.session  # noqa: PLC0415
        return aiobotocore.session
    except ImportError as exc:
        raise ImportError(
            "aiobotocore is required for the SQS queue backend. "
            "Install it with: pip install 'eda-fanout[aws]'"
        ) from exc


def _client_errors() -> tuple[type[BaseException], ...]:
    from botocore.exceptions import BotoCoreError, ClientError  # noqa: PLC0415

    return (BotoCoreError, ClientError, OSError)


def unwrap_sns_envelope(raw: Any) -> Any:
    """Return the inner ``Message`` of an SNS notification, else *raw* as is."""
    if isinstance(raw, dict) and raw.get("Type") == "Notification" and "Message" in raw:
        inner = raw["Message"]
        if isinstance(inner, str):
            try:
                return json.loads(inner)
            except json.JSONDecodeError:
                return inner
        return inner
    return raw


@dataclass
class SqsConfig:
    queue_url: str
    region_name: str = "eu-west-1"
    endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None


class SqsQueue(DurableQueue):
    """Durable-queue contract on an SQS queue.

    ``delivery_count`` is SQS's ``ApproximateReceiveCount``. A message received
    more than ``dead_letter_max_deliveries`` times is deleted and pushed to
    ``dead_letter_sink`` instead of being returned.

    Use as an async context manager to open the client, or pass an already
    created aiobotocore ``client``::

        async with SqsQueue("mailer-queue", SqsConfig(queue_url=url)) as queue:
            await queue.enqueue({"key": "a.jpg"})
    """

    def __init__(
        self,
        name: str,
        config: SqsConfig,
        settings: QueueSettings | None = None,
        *,
        client: Any = None,
        serializer: MessageSerializer[Any] | None = None,
        dead_letter_sink: DeadLetterSink | None = None,
    ) -> None:
        self.name = name
        self.config = config
        self.settings = settings or QueueSettings()
        self.dead_letter_sink: DeadLetterSink = dead_letter_sink or InMemoryDeadLetterSink()
        self._client = client
        self._client_cm: Any = None
        self._serializer = serializer or JsonMessageSerializer()
        # message id -> (receipt handle, monotonic visibility deadline)
        self._receipts: dict[MessageId, tuple[str, float]] = {}
        self._dead_lettered = 0

    async def __aenter__(self) -> SqsQueue:
        if self._client is None:
            session = _require_aiobotocore().get_session()
            kwargs: dict[str, Any] = {"region_name": self.config.region_name}
            if self.config.endpoint_url:
                kwargs["endpoint_url"] = self.config.endpoint_url
            if self.config.aws_access_key_id:
                kwargs["aws_access_key_id"] = self.config.aws_access_key_id
                kwargs["aws_secret_access_key"] = self.config.aws_secret_access_key
            self._client_cm = session.create_client("sqs", **kwargs)
            self._client = await self._client_cm.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._client_cm is not None:
            await self._client_cm.__aexit__(*exc_info)
            self._client_cm = None
            self._client = None

    @property
    def client(self) -> Any:
        if self._client is None:
            raise BackendUnavailableError(self.name, "SQS client is not open; use 'async with SqsQueue(...)'")
        return self._client

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        try:
            return await getattr(self.client, operation)(QueueUrl=self.config.queue_url, **kwargs)
        except _client_errors() as exc:
            raise BackendUnavailableError(
                self.name, f"SQS {operation} failed on '{self.name}': {exc}", cause=exc
            ) from exc

    async def enqueue(self, body: Any, attributes: Mapping[str, str] | None = None) -> MessageId:
        kwargs: dict[str, Any] = {"MessageBody": self._serializer.serialize(body)}
        if attributes:
            kwargs["MessageAttributes"] = {
                k: {"DataType": "String", "StringValue": v} for k, v in attributes.items()
            }
        resp = await self._call("send_message", **kwargs)
        return resp["MessageId"]

    async def dequeue_batch(self, max_count: int, max_wait: float) -> list[Message]:
        if max_count < 1:
            raise ValidationError(f"max_count must be >= 1, got {max_count}")
        if max_wait < 0:
            raise ValidationError(f"max_wait must be >= 0, got {max_wait}")

        self._prune_receipts()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_wait
        claimed: list[Message] = []
        while len(claimed) < max_count:
            remaining = deadline - loop.time()
            wait = round(min(max(remaining, 0), self.settings.receive_wait_seconds, _MAX_RECEIVE_WAIT))
            resp = await self._call(
                "receive_message",
                MaxNumberOfMessages=min(_MAX_RECEIVE_COUNT, max_count - len(claimed)),
                WaitTimeSeconds=wait,
                VisibilityTimeout=int(self.settings.visibility_timeout_seconds),
                AttributeNames=["ApproximateReceiveCount", "SentTimestamp"],
                MessageAttributeNames=["All"],
            )
            received = resp.get("Messages", [])
            for raw in received:
                message = await self._to_message(raw)
                if message is not None:
                    claimed.append(message)
            if deadline - loop.time() <= 0:
                break
            if not received and wait == 0:
                # Sub-second remainder: SQS cannot long-poll for it.
                await asyncio.sleep(min(deadline - loop.time(), 0.2))
        return claimed

    async def ack(self, message_id: MessageId) -> None:
        held = self._receipts.pop(message_id, None)
        if held is None:
            return
        try:
            await self._call("delete_message", ReceiptHandle=held[0])
        except BackendUnavailableError:
            self._receipts.setdefault(message_id, held)
            raise

    async def nack(self, message_id: MessageId) -> None:
        held = self._receipts.pop(message_id, None)
        if held is None:
            return
        await self._call("change_message_visibility", ReceiptHandle=held[0], VisibilityTimeout=0)

    def _prune_receipts(self) -> None:
        """Forget receipts whose visibility timeout has passed; SQS redelivers those."""
        now = time.monotonic()
        expired = [mid for mid, (_, visible_at) in self._receipts.items() if visible_at <= now]
        for mid in expired:
            del self._receipts[mid]

    async def stats(self) -> QueueStats:
        resp = await self._call(
            "get_queue_attributes",
            AttributeNames=["ApproximateNumberOfMessages", "ApproximateNumberOfMessagesNotVisible"],
        )
        attrs = resp.get("Attributes", {})
        return QueueStats(
            queue=self.name,
            available=int(attrs.get("ApproximateNumberOfMessages", 0)),
            in_flight=int(attrs.get("ApproximateNumberOfMessagesNotVisible", 0)),
            dead_lettered=self._dead_lettered,
        )

    async def _to_message(self, raw: dict[str, Any]) -> Message | None:
        system = raw.get("Attributes", {})
        delivery_count = int(system.get("ApproximateReceiveCount", 1))
        sent_ms = system.get("SentTimestamp")
        enqueued_at = datetime.fromtimestamp(int(sent_ms) / 1000, UTC) if sent_ms else datetime.now(UTC)
        attributes = {
            k: v.get("StringValue", "") for k, v in raw.get("MessageAttributes", {}).items()
        }
        body = unwrap_sns_envelope(self._serializer.deserialize(raw["Body"]))

        limit = self.settings.dead_letter_max_deliveries
        if limit is not None and delivery_count > limit:
            self._receipts.pop(raw["MessageId"], None)
            await self._call("delete_message", ReceiptHandle=raw["ReceiptHandle"])
            self._dead_lettered += 1
            await self.dead_letter_sink.push(
                DeadLetterEntry(
                    message_id=raw["MessageId"],
                    queue=self.name,
                    body=body,
                    attributes=attributes,
                    delivery_count=delivery_count - 1,
                    reason=f"received {delivery_count} times, limit is {limit}",
                )
            )
            return None

        self._receipts[raw["MessageId"]] = (
            raw["ReceiptHandle"],
            time.monotonic() + self.settings.visibility_timeout_seconds,
        )
        return Message(
            id=raw["MessageId"],
            body=body,
            attributes=attributes,
            enqueued_at=enqueued_at,
            delivery_count=delivery_count,
            visible_at=datetime.now(UTC) + timedelta(seconds=self.settings.visibility_timeout_seconds),
        )


__all__ = ["SqsConfig", "SqsQueue", "unwrap_sns_envelope"]
