"""Application bridge – storage notifications to topic events."""
from eda_fanout.application.bridge.bridge import ChangeNotificationSource, EventSourceBridge
from eda_fanout.application.bridge.events import ObjectCreatedEvent, parse_notification

__all__ = ["ChangeNotificationSource", "EventSourceBridge", "ObjectCreatedEvent", "parse_notification"]
