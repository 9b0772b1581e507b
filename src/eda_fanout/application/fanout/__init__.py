"""Application fanout – Topic and per-subscriber delivery outcomes."""
from eda_fanout.application.fanout.topic import DeliveryOutcome, PublishResult, Topic

__all__ = ["DeliveryOutcome", "PublishResult", "Topic"]
