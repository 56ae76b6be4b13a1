"""Live change notification."""

from tasktrack.notify.notifier import ChangeNotifier, NotificationEvent
from tasktrack.notify.registry import Connection, ConnectionRegistry, WebSocketConnection

__all__ = [
    "ChangeNotifier",
    "Connection",
    "ConnectionRegistry",
    "NotificationEvent",
    "WebSocketConnection",
]
