"""Adapters – queue backends (in-memory, SQS)."""
