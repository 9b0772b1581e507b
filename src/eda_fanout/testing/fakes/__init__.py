"""Testing fakes – in-memory doubles for queue, handler and storage ports."""
from eda_fanout.kernel.time import FrozenClock
from eda_fanout.testing.fakes.clock import FakeClock
from eda_fanout.testing.fakes.handlers import RecordingHandler
from eda_fanout.testing.fakes.object_store import InMemoryObjectStore
from eda_fanout.testing.fakes.queue import FlakyQueue

__all__ = [
    "FakeClock",
    "FlakyQueue",
    "FrozenClock",
    "InMemoryObjectStore",
    "RecordingHandler",
]
