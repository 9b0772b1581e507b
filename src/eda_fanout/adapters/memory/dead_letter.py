"""In-memory adapters – InMemoryDeadLetterSink."""
from __future__ import annotations

from collections.abc import Callable

from eda_fanout.kernel.errors import NotFoundError
from eda_fanout.kernel.messaging import DeadLetterEntry, DeadLetterSink, DurableQueue, MessageId
from eda_fanout.observability.logging import get_logger

logger = get_logger(__name__)


class InMemoryDeadLetterSink(DeadLetterSink):
    """Dead-letter store kept in a list; entries can be replayed onto a queue.

    ``on_dead_letter`` is called with every pushed entry, which is how callers
    get notified about poison messages.
    """

    def __init__(self, on_dead_letter: Callable[[DeadLetterEntry], None] | None = None) -> None:
        self._entries: list[DeadLetterEntry] = []
        self._on_dead_letter = on_dead_letter

    async def push(self, entry: DeadLetterEntry) -> None:
        self._entries.append(entry)
        logger.warning(
            "message_dead_lettered",
            queue=entry.queue,
            message_id=entry.message_id,
            delivery_count=entry.delivery_count,
            reason=entry.reason,
        )
        if self._on_dead_letter is not None:
            self._on_dead_letter(entry)

    @property
    def entries(self) -> list[DeadLetterEntry]:
        return list(self._entries)

    def for_queue(self, queue: str) -> list[DeadLetterEntry]:
        return [e for e in self._entries if e.queue == queue]

    def get(self, entry_id: str) -> DeadLetterEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError("DeadLetterEntry", entry_id)

    async def replay(self, entry_id: str, queue: DurableQueue) -> MessageId:
        """Re-enqueue the body of *entry_id* on *queue* and drop the entry.

        The replayed message is a new message: fresh id, delivery count 0.
        """
        entry = self.get(entry_id)
        message_id = await queue.enqueue(entry.body, entry.attributes)
        self._entries.remove(entry)
        logger.info("dead_letter_replayed", entry_id=entry_id, queue=queue.name, message_id=message_id)
        return message_id

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["InMemoryDeadLetterSink"]
