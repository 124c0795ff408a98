"""
Change notifier: fire-and-forget fan-out to connected observers.

Tells every connected observer that the task collection changed, without
saying what changed. Observers re-fetch the full list on receipt.
- No payload beyond the event name
- No delivery guarantee, no backlog, no replay
- Delivery runs in background tasks so the triggering request never waits
- An observer whose send fails is dropped
"""
from __future__ import annotations
from typing import Protocol
import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)

TASKS_UPDATED = "tasks_updated"


class Observer(Protocol):
    """Anything that can receive a named change event."""

    async def send_event(self, event: str) -> None: ...


class WebSocketObserver:
    """Observer backed by an accepted websocket connection."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send_event(self, event: str) -> None:
        await self.websocket.send_json({"event": event})

    def __repr__(self) -> str:
        client = self.websocket.client
        return f"WebSocketObserver({client.host}:{client.port})" if client else "WebSocketObserver()"


class ChangeNotifier:
    """Keeps the set of connected observers and broadcasts change signals."""

    def __init__(self, event: str = TASKS_UPDATED):
        self.event = event
        self._observers: set[Observer] = set()
        self._pending: set[asyncio.Task] = set()

    # -- Bookkeeping --

    def connect(self, observer: Observer) -> None:
        self._observers.add(observer)
        logger.info("Observer connected: %r (total=%d)", observer, len(self._observers))

    def disconnect(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.discard(observer)
            logger.info("Observer disconnected: %r (total=%d)", observer, len(self._observers))

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    # -- Broadcast --

    def broadcast_changed(self) -> None:
        """Schedule one signal to every observer connected right now.

        Returns immediately. With no observers this is a no-op.
        """
        observers = list(self._observers)
        if not observers:
            return

        task = asyncio.get_running_loop().create_task(self._fan_out(observers))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _fan_out(self, observers: list[Observer]) -> None:
        results = await asyncio.gather(
            *(o.send_event(self.event) for o in observers),
            return_exceptions=True,
        )
        for observer, result in zip(observers, results):
            if isinstance(result, Exception):
                logger.warning("Dropping observer %r after failed send: %s", observer, result)
                self.disconnect(observer)

    async def drain(self) -> None:
        """Wait for every in-flight broadcast to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
