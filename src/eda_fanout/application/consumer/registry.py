"""Application consumer – HandlerRegistry."""
from __future__ import annotations

from collections.abc import Callable, Iterator

from eda_fanout.kernel.errors import ConflictError, NotFoundError
from eda_fanout.kernel.messaging import BatchHandler


class HandlerRegistry:
    """Maps a queue name to the business handler draining it.

    Usage::

        registry = HandlerRegistry()

        @registry.handler("mailer-queue")
        async def send_mails(batch: Batch) -> HandlerResult: ...
    """

    def __init__(self) -> None:
        self._handlers: dict[str, BatchHandler] = {}

    def register(self, queue_name: str, handler: BatchHandler) -> None:
        if queue_name in self._handlers:
            raise ConflictError(f"A handler is already registered for queue '{queue_name}'")
        self._handlers[queue_name] = handler

    def handler(self, queue_name: str) -> Callable[[BatchHandler], BatchHandler]:
        def decorator(fn: BatchHandler) -> BatchHandler:
            self.register(queue_name, fn)
            return fn

        return decorator

    def get(self, queue_name: str) -> BatchHandler:
        try:
            return self._handlers[queue_name]
        except KeyError:
            raise NotFoundError("Handler for queue", queue_name) from None

    @property
    def queue_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def items(self) -> Iterator[tuple[str, BatchHandler]]:
        return iter(self._handlers.items())

    def __contains__(self, queue_name: object) -> bool:
        return queue_name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


__all__ = ["HandlerRegistry"]
