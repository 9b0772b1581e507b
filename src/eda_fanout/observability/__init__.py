"""Observability – structured logging."""

from eda_fanout.observability.logging import JsonLoggerFactory, get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
