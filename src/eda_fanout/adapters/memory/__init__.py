"""In-memory adapters – queue backend and dead-letter store for tests and local runs."""
from eda_fanout.adapters.memory.dead_letter import InMemoryDeadLetterSink
from eda_fanout.adapters.memory.queue import InMemoryQueue

__all__ = ["InMemoryDeadLetterSink", "InMemoryQueue"]
