"""Shared helper turning per-message results into a ``HandlerResult``."""
from __future__ import annotations

from eda_fanout.kernel.messaging import HandlerResult, MessageId


def batch_result(completed: list[MessageId], failures: dict[MessageId, str]) -> HandlerResult:
    if not failures:
        return HandlerResult.success()
    reason = "; ".join(f"{mid}: {err}" for mid, err in failures.items())
    if not completed:
        return HandlerResult.failure(reason)
    return HandlerResult.partial(completed, reason)


__all__ = ["batch_result"]
