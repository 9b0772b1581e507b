"""Application-layer errors – failures raised by business handlers."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from eda_fanout.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class HandlerError(ApplicationError):
    """A batch handler could not process (some of) its messages.

    ``message_ids`` names the messages that were not processed; the consumer
    leaves them unacknowledged so the queue redelivers them.
    """

    default_code = "handler_error"

    def __init__(
        self,
        message: str,
        *,
        message_ids: Sequence[str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.message_ids: tuple[str, ...] = tuple(message_ids)

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["message_ids"] = list(self.message_ids)
        return base


__all__ = ["ApplicationError", "HandlerError"]
