"""Observability – structlog configuration and logger helper."""
from eda_fanout.observability.logging.factory import JsonLoggerFactory
from eda_fanout.observability.logging.processors import bound_batch, get_logger

__all__ = ["JsonLoggerFactory", "bound_batch", "get_logger"]
