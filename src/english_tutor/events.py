"""Identity events and the channel the quiz session listens on."""
import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedIn:
    user_id: str
    email: str


@dataclass(frozen=True)
class SignedOut:
    pass


class EventChannel:
    """Synchronous publish/subscribe for identity events."""

    def __init__(self):
        self._subscribers: list[Callable] = []

    def subscribe(self, handler: Callable) -> Callable[[], None]:
        """Register ``handler``; returns a function that unsubscribes it."""
        self._subscribers.append(handler)

        def unsubscribe():
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def publish(self, event) -> None:
        logger.debug("publish %s", event)
        for handler in list(self._subscribers):
            handler(event)
