"""Kernel messaging – messages, queue and dead-letter ports, batch contract."""
from eda_fanout.kernel.messaging.batch import Batch, BatchHandler, HandlerResult, Outcome
from eda_fanout.kernel.messaging.dead_letter import DeadLetterEntry, DeadLetterSink
from eda_fanout.kernel.messaging.message import Message, MessageId, QueueStats, new_message_id
from eda_fanout.kernel.messaging.queue import DurableQueue
from eda_fanout.kernel.messaging.serializer import JsonMessageSerializer, MessageSerializer

__all__ = [
    "Batch",
    "BatchHandler",
    "DeadLetterEntry",
    "DeadLetterSink",
    "DurableQueue",
    "HandlerResult",
    "JsonMessageSerializer",
    "Message",
    "MessageId",
    "MessageSerializer",
    "Outcome",
    "QueueStats",
    "new_message_id",
]
