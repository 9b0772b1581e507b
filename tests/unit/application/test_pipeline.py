"""Unit tests for Pipeline wiring – bucket → bridge → topic → queues → consumers."""
from __future__ import annotations

import asyncio

import pytest

from eda_fanout.adapters.memory import InMemoryQueue
from eda_fanout.application.consumer import ConsumerState, HandlerRegistry, InvocationRecord
from eda_fanout.application.email import InMemoryEmailSender
from eda_fanout.application.handlers import LoggingImageProcessor
from eda_fanout.application.pipeline import Pipeline, PipelineSettings, build_image_pipeline
from eda_fanout.config import InvalidSettingValueError, QueueSettings
from eda_fanout.kernel.messaging import DurableQueue, Outcome
from eda_fanout.resilience.retry import RetryPolicy, no_sleep
from eda_fanout.testing import InMemoryObjectStore, RecordingHandler

QUEUES = ("img-created-queue", "mailer-queue")


def _queue_settings() -> dict[str, QueueSettings]:
    return {
        name: QueueSettings(max_batch_size=5, max_batch_wait_seconds=0.05, visibility_timeout_seconds=30)
        for name in QUEUES
    }


def _pipeline(
    sender: InMemoryEmailSender,
    processor: LoggingImageProcessor,
    **kwargs: object,
) -> Pipeline:
    return build_image_pipeline(
        PipelineSettings(mail_recipient="ops@example.com"),
        image_processor=processor,
        email_sender=sender,
        queue_settings=_queue_settings(),
        retry_policy=RetryPolicy(max_attempts=2, sleep=no_sleep),
        **kwargs,  # type: ignore[arg-type]
    )


async def _eventually(predicate: object, timeout: float = 3.0) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():  # type: ignore[operator]
            return True
        await asyncio.sleep(0.02)
    return bool(predicate())  # type: ignore[operator]


class TestWiring:
    def test_image_topology(self) -> None:
        pipeline = _pipeline(InMemoryEmailSender(), LoggingImageProcessor())
        assert pipeline.topic.name == "NewImageTopic"
        assert pipeline.topic.subscribers == QUEUES
        assert set(pipeline.queues) == set(QUEUES)
        assert [c.queue.name for c in pipeline.consumers] == list(QUEUES)

    def test_consumers_per_queue(self) -> None:
        registry = HandlerRegistry()
        registry.register("q", RecordingHandler())
        pipeline = Pipeline("t", registry, consumers_per_queue=3)
        assert len(pipeline.consumers) == 3
        assert {id(c.queue) for c in pipeline.consumers} == {id(pipeline.queues["q"])}

    def test_queue_factory_receives_per_queue_settings(self) -> None:
        created: dict[str, QueueSettings] = {}

        def factory(name: str, settings: QueueSettings) -> DurableQueue:
            created[name] = settings
            return InMemoryQueue(name, settings)

        settings = _queue_settings()
        settings["mailer-queue"] = QueueSettings(dead_letter_max_deliveries=2)
        registry = HandlerRegistry()
        for name in QUEUES:
            registry.register(name, RecordingHandler())
        Pipeline("t", registry, queue_settings=settings, queue_factory=factory)
        assert created["mailer-queue"].dead_letter_max_deliveries == 2
        assert created["img-created-queue"].dead_letter_max_deliveries is None

    def test_empty_registry_is_config_error(self) -> None:
        with pytest.raises(InvalidSettingValueError):
            Pipeline("t", HandlerRegistry())

    def test_zero_consumers_is_config_error(self) -> None:
        registry = HandlerRegistry()
        registry.register("q", RecordingHandler())
        with pytest.raises(InvalidSettingValueError):
            Pipeline("t", registry, consumers_per_queue=0)


class TestRunningPipeline:
    def test_upload_is_processed_and_mailed(self) -> None:
        sender = InMemoryEmailSender()
        processor = LoggingImageProcessor()
        records: list[InvocationRecord] = []

        async def run() -> None:
            store = InMemoryObjectStore("images-bucket")
            async with _pipeline(sender, processor, on_invocation=records.append) as pipeline:
                pipeline.bridge.attach(store)
                for key in ("a.jpg", "b.jpg", "c.jpg"):
                    await store.put_object(key, b"img")
                assert await pipeline.wait_idle(3.0)
            assert not pipeline.running
            assert all(c.state is ConsumerState.STOPPED for c in pipeline.consumers)

        asyncio.run(run())
        assert sorted(processor.processed) == ["a.jpg", "b.jpg", "c.jpg"]
        assert sender.count == 3
        assert {r.queue for r in records} == set(QUEUES)
        assert all(r.outcome is Outcome.SUCCESS for r in records)

    def test_mailer_outage_does_not_affect_image_queue(self) -> None:
        sender = InMemoryEmailSender(fail_when=lambda m: True)
        processor = LoggingImageProcessor()

        async def run() -> None:
            pipeline = _pipeline(sender, processor)
            await pipeline.start()
            await pipeline.bridge.notify(InMemoryObjectStore().notification("a.jpg", b"1"))
            await pipeline.bridge.notify(InMemoryObjectStore().notification("b.jpg", b"2"))
            assert await _eventually(lambda: len(processor.processed) == 2)
            assert await _eventually(lambda: len(pipeline.queues["img-created-queue"]) == 0)  # type: ignore[arg-type]
            await pipeline.stop(timeout=2.0)
            mailer_stats = await pipeline.queues["mailer-queue"].stats()
            assert mailer_stats.in_flight == 2
            assert not await pipeline.wait_idle(0.1)

        asyncio.run(run())
        assert sender.count == 0

    def test_stop_without_start(self) -> None:
        pipeline = _pipeline(InMemoryEmailSender(), LoggingImageProcessor())
        asyncio.run(pipeline.stop())
        assert not pipeline.running

    def test_start_is_idempotent(self) -> None:
        async def run() -> None:
            pipeline = _pipeline(InMemoryEmailSender(), LoggingImageProcessor())
            await pipeline.start()
            tasks = list(pipeline._tasks)
            await pipeline.start()
            assert pipeline._tasks == tasks
            await pipeline.stop(timeout=2.0)

        asyncio.run(run())
