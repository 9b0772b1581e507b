"""Kernel messaging – MessageSerializer port and JSON implementation."""
from __future__ import annotations

import abc
import dataclasses
import json
from typing import Any, Generic, TypeVar

from eda_fanout.kernel.errors import SerializationError

T = TypeVar("T")


class MessageSerializer(abc.ABC, Generic[T]):
    """Port: serialize / deserialize message bodies for networked backends."""

    @abc.abstractmethod
    def serialize(self, body: T) -> str: ...

    @abc.abstractmethod
    def deserialize(self, data: str) -> T: ...


class JsonMessageSerializer(MessageSerializer[Any]):
    """JSON text bodies; dataclasses are sent as dicts, datetimes as ISO strings."""

    def serialize(self, body: Any) -> str:
        if isinstance(body, bytes):
            return body.decode()
        if isinstance(body, str):
            return body
        if dataclasses.is_dataclass(body) and not isinstance(body, type):
            to_dict = getattr(body, "to_dict", None)
            body = to_dict() if callable(to_dict) else dataclasses.asdict(body)
        try:
            return json.dumps(body, default=str)
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                "Cannot serialize message body", payload_type=type(body).__name__, cause=exc
            ) from exc

    def deserialize(self, data: str) -> Any:
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return data


__all__ = ["JsonMessageSerializer", "MessageSerializer"]
