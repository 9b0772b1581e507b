"""Application email – InMemoryEmailSender for unit tests."""
from __future__ import annotations

import uuid
from collections.abc import Callable

from eda_fanout.application.email.message import EmailMessage
from eda_fanout.kernel.errors import ExternalServiceError

__all__ = ["InMemoryEmailSender"]


class InMemoryEmailSender:
    """Fake EmailSender that captures sent messages in memory.

    ``fail_when`` makes ``send`` raise ``ExternalServiceError`` for matching
    messages, which is how tests simulate a provider outage.
    """

    def __init__(self, fail_when: Callable[[EmailMessage], bool] | None = None) -> None:
        self.sent: list[EmailMessage] = []
        self.fail_when = fail_when

    async def send(self, message: EmailMessage) -> str:
        if self.fail_when is not None and self.fail_when(message):
            raise ExternalServiceError("mail", f"Provider rejected mail to {message.to}")
        self.sent.append(message)
        return str(uuid.uuid4())

    def reset(self) -> None:
        """Clear the outbox."""
        self.sent.clear()

    # convenience helpers
    @property
    def count(self) -> int:
        return len(self.sent)

    def last(self) -> EmailMessage | None:
        return self.sent[-1] if self.sent else None
