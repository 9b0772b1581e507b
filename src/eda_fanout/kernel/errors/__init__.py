"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── ValidationError
    │   ├── NotFoundError
    │   └── ConflictError
    ├── ApplicationError     (application.py)
    │   └── HandlerError
    └── InfrastructureError  (infrastructure.py)
        ├── BackendUnavailableError
        ├── SerializationError
        └── ExternalServiceError
"""

from eda_fanout.kernel.errors.application import ApplicationError, HandlerError
from eda_fanout.kernel.errors.base import BaseError
from eda_fanout.kernel.errors.domain import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from eda_fanout.kernel.errors.infrastructure import (
    BackendUnavailableError,
    ExternalServiceError,
    InfrastructureError,
    SerializationError,
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
