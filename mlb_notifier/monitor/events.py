"""
Event Bus: typed in-process channels for monitor output.

The monitor publishes to ``status`` and ``notification``; consumers (desktop
notifier, SSE bridge, CLI printer) subscribe without the monitor knowing
about them. Listeners are invoked synchronously in subscription order and a
failing listener never prevents delivery to the others.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from mlb_notifier.schemas import GameStatus, NotificationEntry

logger = logging.getLogger(__name__)

STATUS = "status"
NOTIFICATION = "notification"

T = TypeVar("T")


class Channel(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)
        logger.debug("EventBus: subscribed %s to %s", getattr(listener, "__name__", listener), self.name)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: Callable[[T], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def publish(self, payload: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception(
                    "EventBus: listener %s failed on %s",
                    getattr(listener, "__name__", listener),
                    self.name,
                )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class EventBus:
    def __init__(self) -> None:
        self.status: Channel[GameStatus] = Channel(STATUS)
        self.notification: Channel[NotificationEntry] = Channel(NOTIFICATION)

    def channel(self, name: str) -> Channel:
        if name == STATUS:
            return self.status
        if name == NOTIFICATION:
            return self.notification
        raise ValueError(f"Unknown event channel: {name}")

    def subscribe(self, name: str, listener: Callable) -> Callable[[], None]:
        return self.channel(name).subscribe(listener)
