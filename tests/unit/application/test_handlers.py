"""Unit tests for the image-processing and mailer handlers."""
from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from eda_fanout.application.bridge import ObjectCreatedEvent
from eda_fanout.application.email import InMemoryEmailSender
from eda_fanout.application.handlers import ImageProcessingHandler, ImageProcessor, LoggingImageProcessor, MailerHandler
from eda_fanout.kernel.errors import ExternalServiceError
from eda_fanout.kernel.messaging import Batch, Message, Outcome


def _event(key: str) -> ObjectCreatedEvent:
    return ObjectCreatedEvent("aws:s3", "images-bucket", key, datetime(2026, 1, 1, tzinfo=UTC), size=10)


def _batch(*keys: str) -> Batch:
    return Batch(queue="q", messages=tuple(Message(body=_event(k)) for k in keys))


class _Processor:
    def __init__(self, reject: set[str], broken: frozenset[str] | set[str] = frozenset()) -> None:
        self.reject = reject
        self.broken = broken

    async def process(self, object_key: str) -> bool:
        if object_key in self.broken:
            raise ExternalServiceError("resizer", "timeout")
        return object_key not in self.reject


class TestImageProcessingHandler:
    def test_all_processed(self) -> None:
        processor = LoggingImageProcessor()
        assert isinstance(processor, ImageProcessor)
        result = asyncio.run(ImageProcessingHandler(processor)(_batch("a.jpg", "b.jpg")))
        assert result.outcome is Outcome.SUCCESS
        assert processor.processed == ["a.jpg", "b.jpg"]

    def test_rejected_and_broken_keys_left_unacked(self) -> None:
        batch = _batch("a.jpg", "b.jpg", "c.jpg")
        result = asyncio.run(ImageProcessingHandler(_Processor({"b.jpg"}, {"c.jpg"}))(batch))
        assert result.outcome is Outcome.PARTIAL
        assert result.completed == {batch.messages[0].id}

    def test_nothing_processed_is_failure(self) -> None:
        result = asyncio.run(ImageProcessingHandler(_Processor({"a.jpg"}))(_batch("a.jpg")))
        assert result.outcome is Outcome.FAILURE

    def test_accepts_dict_bodies(self) -> None:
        processor = LoggingImageProcessor()
        batch = Batch(queue="q", messages=(Message(body=_event("x.png").to_dict()),))
        assert asyncio.run(ImageProcessingHandler(processor)(batch)).outcome is Outcome.SUCCESS
        assert processor.processed == ["x.png"]

    def test_unreadable_body_fails_that_message(self) -> None:
        batch = Batch(queue="q", messages=(Message(body="garbage"), Message(body=_event("ok.jpg"))))
        result = asyncio.run(ImageProcessingHandler(LoggingImageProcessor())(batch))
        assert result.outcome is Outcome.PARTIAL
        assert result.completed == {batch.messages[1].id}


class TestMailerHandler:
    def test_one_mail_per_event(self) -> None:
        sender = InMemoryEmailSender()
        result = asyncio.run(MailerHandler(sender, "ops@example.com")(_batch("a.jpg", "b.jpg")))
        assert result.outcome is Outcome.SUCCESS
        assert sender.count == 2
        mail = sender.sent[0]
        assert mail.to == ["ops@example.com"]
        assert mail.subject == "New Image Upload"
        assert "s3://images-bucket/a.jpg" in mail.html_body
        assert mail.text_body == "Image received: s3://images-bucket/a.jpg (10 bytes)"

    def test_provider_failure_is_partial(self) -> None:
        sender = InMemoryEmailSender(fail_when=lambda m: "b.jpg" in m.html_body)
        batch = _batch("a.jpg", "b.jpg")
        result = asyncio.run(MailerHandler(sender, "ops@example.com")(batch))
        assert result.outcome is Outcome.PARTIAL
        assert result.completed == {batch.messages[0].id}
        assert result.reason is not None

    def test_provider_down_is_failure(self) -> None:
        sender = InMemoryEmailSender(fail_when=lambda m: True)
        result = asyncio.run(MailerHandler(sender, "ops@example.com")(_batch("a.jpg")))
        assert result.outcome is Outcome.FAILURE

    def test_reply_to(self) -> None:
        mail = MailerHandler(InMemoryEmailSender(), "ops@example.com", reply_to="noreply@example.com").compose(
            _event("a.jpg")
        )
        assert mail.reply_to == "noreply@example.com"
