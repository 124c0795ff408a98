"""
Task tracker core events: realtime change signalling.

- ChangeNotifier: fire-and-forget "collection changed" broadcast
- WebSocketObserver: observer adapter for websocket clients
"""
from core.events.notifier import (
    TASKS_UPDATED,
    ChangeNotifier,
    Observer,
    WebSocketObserver,
)

__all__ = [
    "TASKS_UPDATED",
    "ChangeNotifier",
    "Observer",
    "WebSocketObserver",
]
