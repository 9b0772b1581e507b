"""Unit tests for testing fakes."""
from __future__ import annotations

import asyncio
from typing import Any

from eda_fanout.adapters.memory import InMemoryQueue
from eda_fanout.application.bridge import ChangeNotificationSource
from eda_fanout.kernel.messaging import Batch, HandlerResult, Message, Outcome
from eda_fanout.testing import FlakyQueue, InMemoryObjectStore, RecordingHandler


class TestRecordingHandler:
    def test_records_and_responds(self) -> None:
        handler = RecordingHandler(lambda b: HandlerResult.failure("x"))
        batch = Batch(queue="q", messages=(Message(body=1), Message(body=2)))
        result = asyncio.run(handler(batch))
        assert result is not None and result.outcome is Outcome.FAILURE
        assert handler.calls == 1
        assert handler.bodies == [1, 2]
        assert handler.sizes == [2]


class TestFlakyQueue:
    def test_delegates_and_exposes_name(self) -> None:
        async def run() -> None:
            inner = InMemoryQueue("q")
            flaky = FlakyQueue(inner)
            assert flaky.name == "q"
            assert flaky.settings is inner.settings
            mid = await flaky.enqueue("x")
            [m] = await flaky.dequeue_batch(1, 0)
            await flaky.nack(m.id)
            [m] = await flaky.dequeue_batch(1, 0)
            await flaky.ack(mid)
            assert (await flaky.stats()).total == 0

        asyncio.run(run())


class TestInMemoryObjectStore:
    def test_is_notification_source(self) -> None:
        assert isinstance(InMemoryObjectStore(), ChangeNotificationSource)

    def test_put_notifies_listeners(self) -> None:
        received: list[dict[str, Any]] = []

        async def listener(notification: Any) -> None:
            received.append(notification)

        async def run() -> None:
            store = InMemoryObjectStore("images-bucket")
            store.add_listener(listener)
            await store.put_object("a b.jpg", b"123")
            await store.redeliver_last()

        asyncio.run(run())
        assert len(received) == 2
        record = received[0]["Records"][0]
        assert record["eventName"] == "ObjectCreated:Put"
        assert record["s3"]["bucket"]["name"] == "images-bucket"
        assert record["s3"]["object"]["key"] == "a+b.jpg"
        assert record["s3"]["object"]["size"] == 3
