"""
Snapshot observers.

The engine publishes an :class:`EngineSnapshot` on every transition and
tick.  Subscribers are plain callables; a failing subscriber is logged
and never affects the engine or the other subscribers.
"""

import logging
from typing import Callable, Optional

from app.schemas.engine import EngineSnapshot

logger = logging.getLogger(__name__)

Subscriber = Callable[[EngineSnapshot], None]


class SnapshotBus:
    """Fan-out of engine snapshots to subscribers."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self._last: Optional[EngineSnapshot] = None

    @property
    def last(self) -> Optional[EngineSnapshot]:
        """The most recently published snapshot."""
        return self._last

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``.  Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, snapshot: EngineSnapshot) -> None:
        self._last = snapshot
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot subscriber %r failed on '%s'", callback, snapshot.event)

    def clear(self) -> None:
        self._subscribers.clear()
