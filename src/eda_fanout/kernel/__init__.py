"""Kernel – framework-agnostic building blocks: errors, messaging ports, time."""

from eda_fanout.kernel.errors import (
    ApplicationError,
    BackendUnavailableError,
    BaseError,
    ConflictError,
    DomainError,
    ExternalServiceError,
    HandlerError,
    InfrastructureError,
    NotFoundError,
    SerializationError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BackendUnavailableError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "ExternalServiceError",
    "HandlerError",
    "InfrastructureError",
    "NotFoundError",
    "SerializationError",
    "ValidationError",
]
