"""Application handlers – mail notification handler."""
from __future__ import annotations

from eda_fanout.application.bridge import ObjectCreatedEvent
from eda_fanout.application.email import EmailMessage, EmailSender
from eda_fanout.application.handlers._outcome import batch_result
from eda_fanout.kernel.errors import InfrastructureError
from eda_fanout.kernel.messaging import Batch, HandlerResult, MessageId
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)

SUBJECT = "New Image Upload"


class MailerHandler:
    """Sends one "New Image Upload" mail per event in the batch.

    A mail the provider refuses leaves its message unacked so it is retried;
    mails already sent are reported as completed.
    """

    def __init__(self, sender: EmailSender, recipient: str, reply_to: str | None = None) -> None:
        self._sender = sender
        self._recipient = recipient
        self._reply_to = reply_to

    def compose(self, event: ObjectCreatedEvent) -> EmailMessage:
        size = f" ({event.size} bytes)" if event.size is not None else ""
        return EmailMessage(
            to=[self._recipient],
            subject=SUBJECT,
            html_body=(
                "<html><body>"
                f"<h2>{SUBJECT}</h2>"
                f"<p>Image received: <b>{event.location}</b>{size}</p>"
                f"<p>Uploaded at {event.event_time.isoformat()}</p>"
                "</body></html>"
            ),
            text_body=f"Image received: {event.location}{size}",
            reply_to=self._reply_to,
        )

    async def __call__(self, batch: Batch) -> HandlerResult:
        completed: list[MessageId] = []
        failures: dict[MessageId, str] = {}
        for message in batch.messages:
            try:
                event = ObjectCreatedEvent.coerce(message.body)
                await self._sender.send(self.compose(event))
            except InfrastructureError as exc:
                failures[message.id] = exc.message
                continue
            completed.append(message.id)
        logger.info("upload_mails_sent", sent=len(completed), failed=len(failures))
        return batch_result(completed, failures)


__all__ = ["SUBJECT", "MailerHandler"]
