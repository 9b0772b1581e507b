"""Application email – mail provider port, value object and adapters."""
from eda_fanout.application.email.in_memory import InMemoryEmailSender
from eda_fanout.application.email.message import EmailMessage
from eda_fanout.application.email.sender import EmailSender
from eda_fanout.application.email.ses import SesConfig, SesEmailSender

__all__ = [
    "EmailMessage",
    "EmailSender",
    "InMemoryEmailSender",
    "SesConfig",
    "SesEmailSender",
]
