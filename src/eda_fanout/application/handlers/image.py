"""Application handlers – image-processing handler."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from eda_fanout.application.bridge import ObjectCreatedEvent
from eda_fanout.application.handlers._outcome import batch_result
from eda_fanout.kernel.errors import InfrastructureError
from eda_fanout.kernel.messaging import Batch, HandlerResult, MessageId
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ImageProcessor(Protocol):
    """Port: external image-processing logic, called once per uploaded object."""

    async def process(self, object_key: str) -> bool: ...


class LoggingImageProcessor:
    """Processor that only records and logs the keys it was given."""

    def __init__(self) -> None:
        self.processed: list[str] = []

    async def process(self, object_key: str) -> bool:
        self.processed.append(object_key)
        logger.info("image_processed", key=object_key)
        return True


class ImageProcessingHandler:
    """Calls ``ImageProcessor.process`` for the object key of every message.

    Keys the processor rejects (``False`` or an ``InfrastructureError``) are
    left unacked; the rest of the batch is reported as completed.
    """

    def __init__(self, processor: ImageProcessor) -> None:
        self._processor = processor

    async def __call__(self, batch: Batch) -> HandlerResult:
        completed: list[MessageId] = []
        failures: dict[MessageId, str] = {}
        for message in batch.messages:
            try:
                event = ObjectCreatedEvent.coerce(message.body)
                ok = await self._processor.process(event.key)
            except InfrastructureError as exc:
                failures[message.id] = exc.message
                continue
            if ok:
                completed.append(message.id)
            else:
                failures[message.id] = f"processing rejected {event.key}"
        if failures:
            logger.warning("images_not_processed", failed=list(failures))
        return batch_result(completed, failures)


__all__ = ["ImageProcessingHandler", "ImageProcessor", "LoggingImageProcessor"]
