"""Unit tests for Topic fan-out."""
from __future__ import annotations

import asyncio

from eda_fanout.adapters.memory import InMemoryQueue
from eda_fanout.application.fanout import Topic
from eda_fanout.resilience.retry import RetryPolicy, no_sleep
from eda_fanout.testing import FailureInjector, FlakyQueue


def _topic() -> Topic:
    return Topic("NewImageTopic", RetryPolicy(max_attempts=3, sleep=no_sleep))


class TestSubscribe:
    def test_subscribe_is_idempotent(self) -> None:
        async def run() -> None:
            topic = _topic()
            queue = InMemoryQueue("img-created-queue")
            assert topic.subscribe(queue) is True
            assert topic.subscribe(queue) is False
            assert topic.subscribe(InMemoryQueue("img-created-queue")) is False
            result = await topic.publish({"key": "a.jpg"})
            assert len(result.outcomes) == 1
            assert len(queue) == 1

        asyncio.run(run())

    def test_unsubscribe(self) -> None:
        topic = _topic()
        topic.subscribe(InMemoryQueue("mailer-queue"))
        assert "mailer-queue" in topic
        assert topic.unsubscribe("mailer-queue") is True
        assert topic.unsubscribe("mailer-queue") is False
        assert topic.subscribers == ()


class TestPublish:
    def test_one_independent_copy_per_subscriber(self) -> None:
        async def run() -> None:
            topic = _topic()
            images, mailer = InMemoryQueue("img-created-queue"), InMemoryQueue("mailer-queue")
            topic.subscribe(images)
            topic.subscribe(mailer)
            result = await topic.publish({"key": "a.jpg"})
            assert result.all_delivered
            [img_msg] = images.snapshot()
            [mail_msg] = mailer.snapshot()
            assert img_msg.id != mail_msg.id
            assert img_msg.body == mail_msg.body == {"key": "a.jpg"}
            assert result.outcome_for("img-created-queue").message_id == img_msg.id  # type: ignore[union-attr]
            assert img_msg.attributes["topic"] == "NewImageTopic"
            assert img_msg.attributes["event_id"] == result.event_id

            # acking one copy leaves the other untouched
            [claimed] = await images.dequeue_batch(1, 0)
            await images.ack(claimed.id)
            assert len(images) == 0
            assert len(mailer) == 1

        asyncio.run(run())

    def test_no_subscribers(self) -> None:
        result = asyncio.run(_topic().publish("x"))
        assert result.outcomes == ()
        assert result.all_delivered

    def test_failed_subscriber_does_not_block_others(self) -> None:
        async def run() -> None:
            topic = _topic()
            images = InMemoryQueue("img-created-queue")
            broken = FlakyQueue(InMemoryQueue("mailer-queue"))
            broken.enqueue_failures.permanent()
            topic.subscribe(broken)
            topic.subscribe(images)
            result = await topic.publish({"key": "a.jpg"})
            assert not result.all_delivered
            [failed] = result.failed
            assert failed.queue == "mailer-queue"
            assert failed.attempts == 3
            assert failed.error is not None
            assert [o.queue for o in result.delivered] == ["img-created-queue"]
            assert len(images) == 1

        asyncio.run(run())

    def test_transient_failure_retried_for_that_subscriber_only(self) -> None:
        async def run() -> None:
            topic = _topic()
            flaky = FlakyQueue(InMemoryQueue("mailer-queue"), enqueue_failures=FailureInjector(fail_times=2))
            images = FlakyQueue(InMemoryQueue("img-created-queue"))
            topic.subscribe(flaky)
            topic.subscribe(images)
            result = await topic.publish({"key": "a.jpg"})
            assert result.all_delivered
            assert result.outcome_for("mailer-queue").attempts == 3  # type: ignore[union-attr]
            assert result.outcome_for("img-created-queue").attempts == 1  # type: ignore[union-attr]
            assert images.enqueue_failures.calls == 1
            assert len(flaky.inner) == 1  # type: ignore[arg-type]

        asyncio.run(run())

    def test_non_transient_error_recorded_without_retry(self) -> None:
        async def run() -> None:
            topic = _topic()
            bad = FlakyQueue(
                InMemoryQueue("mailer-queue"),
                enqueue_failures=FailureInjector(fail_times=1, exception_factory=lambda: ValueError("bad body")),
            )
            topic.subscribe(bad)
            result = await topic.publish("x")
            [outcome] = result.outcomes
            assert outcome.attempts == 1
            assert "bad body" in (outcome.error or "")

        asyncio.run(run())

    def test_deliveries_run_concurrently(self) -> None:
        class SlowQueue(InMemoryQueue):
            async def enqueue(self, body, attributes=None):  # type: ignore[no-untyped-def]
                await asyncio.sleep(0.2)
                return await super().enqueue(body, attributes)

        async def run() -> float:
            topic = _topic()
            for name in ("a", "b", "c"):
                topic.subscribe(SlowQueue(name))
            loop = asyncio.get_running_loop()
            start = loop.time()
            await topic.publish("x")
            return loop.time() - start

        assert asyncio.run(run()) < 0.5
