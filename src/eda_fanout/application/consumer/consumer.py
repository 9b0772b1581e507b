"""Application consumer – BatchConsumer.

State machine::

    IDLE ──dequeue_batch──▶ COLLECTING ──non-empty──▶ DISPATCHING ──▶ IDLE
      ▲                          │
      └────────empty─────────────┘
    STOPPED is entered from the loop once a stop was requested.

Acknowledgement policy after a dispatch:

* handler returns ``None`` / ``HandlerResult.success()``: ack every message.
* handler returns ``HandlerResult.failure()`` or raises: ack nothing.
* handler returns ``HandlerResult.partial(ids)``, or raises ``HandlerError``
  naming the failed ids: ack only the completed members of the batch.

Unacked messages come back once their visibility timeout passes (or at once
with ``nack_on_failure``); the queue's dead-letter limit stops the cycle.
"""
from __future__ import annotations

import asyncio
import dataclasses
import inspect
import time
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum

from eda_fanout.config import QueueSettings
from eda_fanout.kernel.errors import HandlerError, InfrastructureError
from eda_fanout.kernel.messaging import Batch, BatchHandler, DurableQueue, HandlerResult, MessageId, Outcome
from eda_fanout.observability.logging import bound_batch, get_logger
from eda_fanout.resilience.retry import RetryPolicy

logger = get_logger(__name__)


class ConsumerState(StrEnum):
    IDLE = "idle"
    COLLECTING = "collecting"
    DISPATCHING = "dispatching"
    STOPPED = "stopped"


@dataclasses.dataclass(frozen=True)
class InvocationRecord:
    """One handler invocation, kept for inspection and reporting."""

    batch_id: str
    queue: str
    message_ids: tuple[MessageId, ...]
    outcome: Outcome
    acked: tuple[MessageId, ...] = ()
    error: str | None = None
    started_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))
    duration_ms: float = 0.0

    @property
    def unacked(self) -> tuple[MessageId, ...]:
        acked = set(self.acked)
        return tuple(m for m in self.message_ids if m not in acked)


class BatchConsumer:
    """Polls one queue and hands each non-empty batch to a handler once.

    Several consumers may drain the same queue; the queue's claim/visibility
    primitive keeps a message with a single holder at a time.

    Parameters
    ----------
    queue:
        The queue to drain.
    handler:
        Sync or async callable receiving a ``Batch``.
    settings:
        Batch size, batch wait window and ``nack_on_failure``. Defaults to the
        queue's own ``settings`` when it has them.
    retry_policy:
        Retry for transient backend failures of dequeue / ack / nack.
    on_invocation:
        Called with every ``InvocationRecord``.
    history_size:
        How many recent records ``history`` keeps.
    """

    def __init__(
        self,
        queue: DurableQueue,
        handler: BatchHandler,
        settings: QueueSettings | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        on_invocation: Callable[[InvocationRecord], None] | None = None,
        history_size: int = 100,
    ) -> None:
        self._queue = queue
        self._handler = handler
        self.settings = settings or getattr(queue, "settings", None) or QueueSettings()
        self._retry = retry_policy or RetryPolicy(max_attempts=3)
        self._on_invocation = on_invocation
        self._history: deque[InvocationRecord] = deque(maxlen=history_size)
        self._state = ConsumerState.IDLE
        self._stop_requested = asyncio.Event()

    @property
    def queue(self) -> DurableQueue:
        return self._queue

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def history(self) -> list[InvocationRecord]:
        return list(self._history)

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def request_stop(self) -> None:
        """Ask :meth:`run` to halt after the current poll/dispatch cycle."""
        self._stop_requested.set()

    async def run(self) -> None:
        """Poll until :meth:`request_stop`; a failing cycle never ends the loop."""
        logger.info("consumer_started", queue=self._queue.name)
        try:
            while not self._stop_requested.is_set():
                await self.poll_once()
        finally:
            self._state = ConsumerState.STOPPED
            logger.info("consumer_stopped", queue=self._queue.name)

    async def poll_once(self) -> InvocationRecord | None:
        """Run a single IDLE → COLLECTING → DISPATCHING → IDLE cycle.

        Returns the invocation record, or ``None`` when nothing was dispatched.
        """
        self._state = ConsumerState.COLLECTING
        try:
            messages = await self._retry.execute_async(
                lambda: self._queue.dequeue_batch(
                    self.settings.max_batch_size, self.settings.max_batch_wait_seconds
                )
            )
        except InfrastructureError as exc:
            self._state = ConsumerState.IDLE
            logger.warning("dequeue_failed", queue=self._queue.name, error=exc.to_dict())
            return None
        if not messages:
            self._state = ConsumerState.IDLE
            return None

        self._state = ConsumerState.DISPATCHING
        try:
            record = await self._dispatch(Batch(queue=self._queue.name, messages=tuple(messages)))
        finally:
            self._state = ConsumerState.IDLE
        self._history.append(record)
        if self._on_invocation is not None:
            try:
                self._on_invocation(record)
            except Exception:  # noqa: BLE001
                logger.exception("invocation_hook_failed", queue=self._queue.name, batch_id=record.batch_id)
        return record

    async def _dispatch(self, batch: Batch) -> InvocationRecord:
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        error: str | None = None
        with bound_batch(batch.queue, batch.id):
            try:
                result = self._handler(batch)
                if inspect.isawaitable(result):
                    result = await result
                completed = self._completed(batch, result)
                outcome = result.outcome if isinstance(result, HandlerResult) else Outcome.SUCCESS
                if isinstance(result, HandlerResult):
                    error = result.reason
            except HandlerError as exc:
                failed = set(exc.message_ids)
                completed = tuple(m for m in batch.message_ids if m not in failed) if failed else ()
                outcome = Outcome.PARTIAL if completed else Outcome.FAILURE
                error = exc.message
                logger.warning("handler_failed", message_ids=list(batch.message_ids), error=exc.to_dict())
            except Exception as exc:  # noqa: BLE001
                completed = ()
                outcome = Outcome.FAILURE
                error = repr(exc)
                logger.exception("handler_failed", message_ids=list(batch.message_ids))

            acked = await self._settle(batch, completed)
            record = InvocationRecord(
                batch_id=batch.id,
                queue=batch.queue,
                message_ids=batch.message_ids,
                outcome=outcome,
                acked=acked,
                error=error,
                started_at=started_at,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            logger.info(
                "batch_dispatched",
                size=len(batch),
                outcome=str(outcome),
                acked=len(acked),
                duration_ms=round(record.duration_ms, 2),
            )
        return record

    @staticmethod
    def _completed(batch: Batch, result: object) -> tuple[MessageId, ...]:
        if result is None:
            return batch.message_ids
        if not isinstance(result, HandlerResult):
            raise HandlerError(f"Handler returned {type(result).__name__}, expected HandlerResult or None")
        if result.outcome is Outcome.SUCCESS:
            return batch.message_ids
        if result.outcome is Outcome.PARTIAL:
            return tuple(m for m in batch.message_ids if m in result.completed)
        return ()

    async def _settle(self, batch: Batch, completed: tuple[MessageId, ...]) -> tuple[MessageId, ...]:
        acked: list[MessageId] = []
        for message_id in completed:
            try:
                await self._retry.execute_async(lambda m=message_id: self._queue.ack(m))
            except InfrastructureError as exc:
                # Left in flight; the queue redelivers it after the visibility timeout.
                logger.warning("ack_failed", message_id=message_id, error=exc.to_dict())
                continue
            acked.append(message_id)

        if self.settings.nack_on_failure:
            done = set(completed)
            for message_id in batch.message_ids:
                if message_id in done:
                    continue
                try:
                    await self._retry.execute_async(lambda m=message_id: self._queue.nack(m))
                except InfrastructureError as exc:
                    logger.warning("nack_failed", message_id=message_id, error=exc.to_dict())
        return tuple(acked)


__all__ = ["BatchConsumer", "ConsumerState", "InvocationRecord"]
