"""Infrastructure errors – backend I/O failures, external integrations."""

from __future__ import annotations

from typing import Any

from eda_fanout.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure. Callers treat these as transient."""

    default_code = "infrastructure_error"


class BackendUnavailableError(InfrastructureError):
    """A queue backend call (enqueue, receive, delete…) failed."""

    default_code = "backend_unavailable"

    def __init__(
        self,
        resource: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Queue backend '{resource}' is unavailable", **kwargs)
        self.resource = resource


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize a message body or notification."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


class ExternalServiceError(InfrastructureError):
    """An external provider (mail, image processing…) reported a failure."""

    default_code = "external_service_error"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"External service '{service}' error", **kwargs)
        self.service = service
        self.status_code = status_code


__all__ = [
    "BackendUnavailableError",
    "ExternalServiceError",
    "InfrastructureError",
    "SerializationError",
]
