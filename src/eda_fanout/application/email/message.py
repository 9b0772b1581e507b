"""Application email – EmailMessage value object."""
from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["EmailMessage"]


@dataclass(frozen=True)
class EmailMessage:
    """A fully-resolved email message ready to be sent."""

    to: list[str]
    subject: str
    html_body: str
    text_body: str | None = None
    cc: list[str] = field(default_factory=list)
    reply_to: str | None = None

    def all_recipients(self) -> list[str]:
        return self.to + self.cc
