"""Push-based event stream that ``track_events`` can subscribe to."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from .disposable import Disposable
from .telemetry.events import TrackingEvent


logger = logging.getLogger(__name__)

Subscriber = Callable[[TrackingEvent], None]


class EventStream:
    """
    Hot stream of tracking descriptors.

    ``publish`` hands the event synchronously to every current subscriber,
    in subscription order. Nothing is buffered: subscribers only see events
    published while they are subscribed.
    """

    def __init__(self):
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Disposable:
        self._subscribers.append(subscriber)
        return Disposable(lambda: self._remove(subscriber))

    def publish(self, event: TrackingEvent | Mapping[str, Any]) -> None:
        event = TrackingEvent.coerce(event)
        for subscriber in list(self._subscribers):
            subscriber(event)

    def emit(self, type: str, data: Mapping[str, Any] | None = None) -> None:
        self.publish(TrackingEvent(type=type, data=data))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _remove(self, subscriber: Subscriber) -> None:
        try:
            self._subscribers.remove(subscriber)
        except ValueError:
            logger.debug("Subscriber already removed")
