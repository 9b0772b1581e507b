"""Testing support – fakes and chaos helpers for queue, topic and consumer tests."""

from eda_fanout.testing.chaos import FailureInjector
from eda_fanout.testing.fakes import (
    FakeClock,
    FlakyQueue,
    InMemoryObjectStore,
    RecordingHandler,
)

__all__ = [
    "FailureInjector",
    "FakeClock",
    "FlakyQueue",
    "InMemoryObjectStore",
    "RecordingHandler",
]
