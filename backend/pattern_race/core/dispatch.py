"""
Synchronous subscriber fan-out.

Each Broadcaster owns a mapping of subscriber id to callback. Broadcasting
iterates a snapshot of that mapping, so callbacks may subscribe, unsubscribe
or publish again without invalidating the loop, and a failing callback is
logged without stopping delivery to the others.
"""
import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Broadcaster(Generic[T]):
    """Id-keyed subscriber registry with error-isolated delivery."""

    def __init__(self, name: str):
        self.name = name
        self._subscribers: dict[str, Callable[[T], None]] = {}

    def subscribe(self, subscriber_id: str, callback: Callable[[T], None]) -> None:
        """Register a callback. An existing id is replaced, not stacked."""
        self._subscribers[subscriber_id] = callback

    def unsubscribe(self, subscriber_id: str) -> None:
        self._subscribers.pop(subscriber_id, None)

    def clear(self) -> None:
        self._subscribers.clear()

    def has_subscriber(self, subscriber_id: str) -> bool:
        return subscriber_id in self._subscribers

    def __len__(self) -> int:
        return len(self._subscribers)

    def broadcast(self, event: T) -> int:
        """
        Deliver an event to every current subscriber.

        Returns:
            Number of callbacks that completed without raising
        """
        delivered = 0
        for subscriber_id, callback in list(self._subscribers.items()):
            try:
                callback(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"{self.name} subscriber '{subscriber_id}' failed: {str(e)}",
                    exc_info=True,
                )
        return delivered
