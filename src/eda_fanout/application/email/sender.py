"""Application email – EmailSender Protocol (port)."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from eda_fanout.application.email.message import EmailMessage

__all__ = ["EmailSender"]


@runtime_checkable
class EmailSender(Protocol):
    """Port: send transactional email messages.

    ``send`` raises (typically ``ExternalServiceError``) when the provider
    rejects or cannot take the message.
    """

    async def send(self, message: EmailMessage) -> str:
        """Send a single message; returns an opaque message-id string."""
        ...
