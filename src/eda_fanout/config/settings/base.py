"""Config settings – Settings base class and the per-queue settings."""
from __future__ import annotations

import dataclasses

from eda_fanout.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: dataclasses.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class QueueSettings(Settings):
    """Configuration surface of one queue and the consumer draining it.

    ``dead_letter_max_deliveries`` of ``None`` means messages are redelivered
    without bound. ``receive_wait_seconds`` is the long-poll wait of a single
    backend receive call; networked backends cap it at 20 seconds.
    """

    _prefix = "QUEUE"

    visibility_timeout_seconds: float = 30.0
    max_batch_size: int = 5
    max_batch_wait_seconds: float = 5.0
    dead_letter_max_deliveries: int | None = None
    receive_wait_seconds: float = 10.0
    nack_on_failure: bool = False

    def _validate(self) -> None:
        if self.visibility_timeout_seconds <= 0:
            raise InvalidSettingValueError(
                "visibility_timeout_seconds", self.visibility_timeout_seconds, "must be > 0"
            )
        if self.max_batch_size < 1:
            raise InvalidSettingValueError("max_batch_size", self.max_batch_size, "must be >= 1")
        if self.max_batch_wait_seconds < 0:
            raise InvalidSettingValueError(
                "max_batch_wait_seconds", self.max_batch_wait_seconds, "must be >= 0"
            )
        if self.max_batch_wait_seconds >= self.visibility_timeout_seconds:
            raise InvalidSettingValueError(
                "max_batch_wait_seconds",
                self.max_batch_wait_seconds,
                "must be < visibility_timeout_seconds",
            )
        if self.dead_letter_max_deliveries is not None and self.dead_letter_max_deliveries < 1:
            raise InvalidSettingValueError(
                "dead_letter_max_deliveries", self.dead_letter_max_deliveries, "must be >= 1 or unset"
            )
        if self.receive_wait_seconds < 0:
            raise InvalidSettingValueError(
                "receive_wait_seconds", self.receive_wait_seconds, "must be >= 0"
            )


__all__ = ["QueueSettings", "Settings"]
