"""
eda_fanout – storage-event fan-out and batched queue consumption.

Import path convention::

    from eda_fanout.kernel.messaging import DurableQueue, Message
    from eda_fanout.application.fanout import Topic
    from eda_fanout.application.consumer import BatchConsumer
    from eda_fanout.adapters.memory import InMemoryQueue
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
