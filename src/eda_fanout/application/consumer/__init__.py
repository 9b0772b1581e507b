"""Application consumer – batch consumer loop and handler registry."""
from eda_fanout.application.consumer.consumer import BatchConsumer, ConsumerState, InvocationRecord
from eda_fanout.application.consumer.registry import HandlerRegistry

__all__ = ["BatchConsumer", "ConsumerState", "HandlerRegistry", "InvocationRecord"]
