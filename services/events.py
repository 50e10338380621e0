"""
Event Streams

Minimal typed publish/subscribe used between the media engine, the playback
state machine and the views. Everything runs on one event loop, so delivery
is synchronous and in emission order.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``EventStream.subscribe``; cancel to stop delivery."""

    def __init__(self, stream: EventStream, callback: Callable) -> None:
        self._stream = stream
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._stream._remove(self)


class EventStream(Generic[T]):
    """A named stream of events of one type."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def emit(self, event: T) -> None:
        """Deliver ``event`` to every live subscriber.

        A subscriber cancelled by an earlier callback during the same emit
        does not receive the event. Callback errors are logged, not raised.
        """
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription._callback(event)
            except Exception as e:
                logger.error(f"Subscriber of '{self.name}' failed: {type(e).__name__}: {e}", exc_info=True)

    def clear(self) -> None:
        """Cancel every subscription on this stream."""
        for subscription in list(self._subscriptions):
            subscription.cancel()

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
