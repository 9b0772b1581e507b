"""Testing chaos – failure injection."""
from eda_fanout.testing.chaos.failure import FailureInjector

__all__ = ["FailureInjector"]
