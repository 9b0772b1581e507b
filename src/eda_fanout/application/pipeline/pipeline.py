"""Application pipeline – Pipeline.

Wires ``bridge → topic → {queue: consumer}`` from a ``HandlerRegistry``:
one subscriber queue per registered handler, drained by its own consumers.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from eda_fanout.adapters.memory import InMemoryQueue
from eda_fanout.application.bridge import EventSourceBridge
from eda_fanout.application.consumer import BatchConsumer, HandlerRegistry, InvocationRecord
from eda_fanout.application.email import EmailSender
from eda_fanout.application.fanout import Topic
from eda_fanout.application.handlers import ImageProcessingHandler, ImageProcessor, MailerHandler
from eda_fanout.application.pipeline.settings import PipelineSettings
from eda_fanout.config import QueueSettings
from eda_fanout.config.validation import InvalidSettingValueError
from eda_fanout.kernel.messaging import DurableQueue
from eda_fanout.observability.logging import get_logger
from eda_fanout.resilience.retry import RetryPolicy

logger = get_logger(__name__)

QueueFactory = Callable[[str, QueueSettings], DurableQueue]


def in_memory_queue_factory(name: str, settings: QueueSettings) -> DurableQueue:
    return InMemoryQueue(name, settings)


class Pipeline:
    """Topic, subscriber queues, bridge and consumers for one event source.

    Dead-letter policy stays per queue: each queue gets its own
    ``QueueSettings`` from ``queue_settings`` (default ``QueueSettings()``).
    """

    def __init__(
        self,
        topic_name: str,
        registry: HandlerRegistry,
        *,
        queue_settings: Mapping[str, QueueSettings] | None = None,
        queue_factory: QueueFactory | None = None,
        retry_policy: RetryPolicy | None = None,
        consumers_per_queue: int = 1,
        on_invocation: Callable[[InvocationRecord], None] | None = None,
        source_name: str | None = None,
    ) -> None:
        if consumers_per_queue < 1:
            raise InvalidSettingValueError("consumers_per_queue", consumers_per_queue, "must be >= 1")
        if len(registry) == 0:
            raise InvalidSettingValueError("registry", registry.queue_names, "needs at least one handler")

        factory = queue_factory or in_memory_queue_factory
        settings_by_queue = dict(queue_settings or {})
        self.topic = Topic(topic_name, retry_policy)
        self.queues: dict[str, DurableQueue] = {}
        self.consumers: list[BatchConsumer] = []
        for name, handler in registry.items():
            settings = settings_by_queue.get(name) or QueueSettings()
            queue = factory(name, settings)
            self.topic.subscribe(queue)
            self.queues[name] = queue
            for _ in range(consumers_per_queue):
                self.consumers.append(
                    BatchConsumer(queue, handler, settings, retry_policy=retry_policy, on_invocation=on_invocation)
                )
        self.bridge = EventSourceBridge(self.topic, source_name)
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(consumer.run(), name=f"consumer:{consumer.queue.name}:{i}")
            for i, consumer in enumerate(self.consumers)
        ]
        logger.info("pipeline_started", topic=self.topic.name, queues=list(self.queues))

    async def stop(self, timeout: float | None = None) -> None:
        """Ask every consumer to finish its current cycle, then wait for them.

        Consumers still running after *timeout* seconds are cancelled; their
        claimed messages return to the queue when the visibility timeout passes.
        """
        for consumer in self.consumers:
            consumer.request_stop()
        if not self._tasks:
            return
        _, pending = await asyncio.wait(self._tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning("pipeline_stop_cancelled", cancelled=len(pending))
        self._tasks = []
        logger.info("pipeline_stopped", topic=self.topic.name)

    async def wait_idle(self, timeout: float, poll_interval: float = 0.05) -> bool:
        """Wait until every queue is empty; ``False`` if *timeout* passes first."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            stats = [await q.stats() for q in self.queues.values()]
            if all(s.total == 0 for s in stats):
                return True
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(poll_interval)

    async def __aenter__(self) -> Pipeline:
        await self.start()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.stop()


def build_image_pipeline(
    settings: PipelineSettings,
    *,
    image_processor: ImageProcessor,
    email_sender: EmailSender,
    queue_settings: Mapping[str, QueueSettings] | None = None,
    queue_factory: QueueFactory | None = None,
    retry_policy: RetryPolicy | None = None,
    on_invocation: Callable[[InvocationRecord], None] | None = None,
) -> Pipeline:
    """The image-upload topology: one topic, an image-processing queue and a mailer queue."""
    registry = HandlerRegistry()
    registry.register(settings.image_queue, ImageProcessingHandler(image_processor))
    registry.register(settings.mailer_queue, MailerHandler(email_sender, settings.mail_recipient, settings.mail_reply_to))
    return Pipeline(
        settings.topic_name,
        registry,
        queue_settings=queue_settings,
        queue_factory=queue_factory,
        retry_policy=retry_policy,
        consumers_per_queue=settings.consumers_per_queue,
        on_invocation=on_invocation,
    )


__all__ = ["Pipeline", "QueueFactory", "build_image_pipeline", "in_memory_queue_factory"]
