"""Observability – get_logger helper and batch-scoped context binding."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


@contextmanager
def bound_batch(queue: str, batch_id: str) -> Iterator[None]:
    """Bind ``queue`` and ``batch_id`` into structlog contextvars.

    Everything a handler logs while the block is active carries both keys.
    """
    with structlog.contextvars.bound_contextvars(queue=queue, batch_id=batch_id):
        yield


__all__ = ["bound_batch", "get_logger"]
