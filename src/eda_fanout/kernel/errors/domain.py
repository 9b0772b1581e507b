"""Domain errors – invalid arguments, missing or conflicting registrations."""

from __future__ import annotations

from typing import Any

from eda_fanout.kernel.errors.base import BaseError


class DomainError(BaseError):
    """A broker rule was violated by the caller."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """An argument is outside its allowed range (e.g. ``max_count < 1``)."""

    default_code = "validation_error"


class NotFoundError(DomainError):
    """The requested queue, handler or dead-letter entry does not exist."""

    default_code = "not_found"

    def __init__(self, resource: str, identifier: Any = None, **kwargs: Any) -> None:
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} '{identifier}' not found"
        super().__init__(msg, **kwargs)
        self.resource = resource
        self.identifier = identifier


class ConflictError(DomainError):
    """Registering something that is already registered."""

    default_code = "conflict"


__all__ = ["ConflictError", "DomainError", "NotFoundError", "ValidationError"]
