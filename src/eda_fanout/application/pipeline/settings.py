"""Application pipeline – PipelineSettings and per-queue settings loading."""
from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable

from eda_fanout.config import EnvSettingsLoader, QueueSettings, Settings, SettingsLoader
from eda_fanout.config.validation import InvalidSettingValueError

IMAGE_QUEUE = "img-created-queue"
MAILER_QUEUE = "mailer-queue"


@dataclasses.dataclass
class PipelineSettings(Settings):
    """Names and mail routing of the image-upload pipeline.

    Loaded from ``PIPELINE_*`` variables, e.g. ``PIPELINE_MAIL_RECIPIENT``.
    """

    _prefix = "PIPELINE"

    topic_name: str = "NewImageTopic"
    image_queue: str = IMAGE_QUEUE
    mailer_queue: str = MAILER_QUEUE
    mail_recipient: str = "uploads@example.com"
    mail_reply_to: str | None = None
    consumers_per_queue: int = 1

    def _validate(self) -> None:
        for name in ("topic_name", "image_queue", "mailer_queue", "mail_recipient"):
            if not getattr(self, name):
                raise InvalidSettingValueError(name, getattr(self, name), "must not be empty")
        if self.image_queue == self.mailer_queue:
            raise InvalidSettingValueError("mailer_queue", self.mailer_queue, "must differ from image_queue")
        if "@" not in self.mail_recipient:
            raise InvalidSettingValueError("mail_recipient", self.mail_recipient, "must be an email address")
        if self.consumers_per_queue < 1:
            raise InvalidSettingValueError("consumers_per_queue", self.consumers_per_queue, "must be >= 1")


def env_prefix(queue_name: str) -> str:
    """``img-created-queue`` → ``IMG_CREATED_QUEUE``."""
    return re.sub(r"[^A-Za-z0-9]+", "_", queue_name).strip("_").upper()


def image_pipeline_settings() -> dict[str, QueueSettings]:
    """Both queues batch 5 messages within a 5 s window and long-poll for 10 s."""
    return {
        IMAGE_QUEUE: QueueSettings(max_batch_size=5, max_batch_wait_seconds=5.0, receive_wait_seconds=10.0),
        MAILER_QUEUE: QueueSettings(max_batch_size=5, max_batch_wait_seconds=5.0, receive_wait_seconds=10.0),
    }


def load_queue_settings(
    queue_names: Iterable[str],
    loader_factory: type[SettingsLoader] = EnvSettingsLoader,
) -> dict[str, QueueSettings]:
    """Load ``QueueSettings`` per queue from ``{QUEUE_NAME}_*`` variables.

    ``loader_factory`` is called with ``prefix=`` and must accept it.
    """
    return {
        name: loader_factory(prefix=env_prefix(name)).load(QueueSettings)  # type: ignore[call-arg]
        for name in queue_names
    }


__all__ = [
    "IMAGE_QUEUE",
    "MAILER_QUEUE",
    "PipelineSettings",
    "env_prefix",
    "image_pipeline_settings",
    "load_queue_settings",
]
