"""Transports that carry tracked events away from the facade."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Protocol

from .telemetry.emitter import TelemetryEmitter
from .telemetry.events import TrackedEvent
from .telemetry.sinks.base import TelemetrySink


logger = logging.getLogger(__name__)


class Transport(Protocol):
    """
    Delivery mechanism behind the tracker facade.

    Deferred calls may return anything; the facade ignores it. Immediate
    calls may return an awaitable that completes when delivery is
    confirmed, or None when nothing is in flight.
    """

    def track(
        self,
        event_name: str,
        payload: Mapping[str, Any],
        immediate: bool = False,
    ) -> Awaitable[None] | None: ...


class NullTransport:
    """Transport used when tracking is disabled; discards everything."""
    supported = False

    def track(self, event_name, payload, immediate=False):
        return None


@dataclass
class EmitterTransport:
    """
    Transport backed by the reference telemetry pipeline.

    Deferred events go through the emitter queue and on to the batcher.
    Immediate events skip both and are sent straight to the sink; the
    returned coroutine raises whatever the sink raises. A full queue is
    a drop, never an error for the caller.
    """
    emitter: TelemetryEmitter
    sink: TelemetrySink
    supported = True

    def track(
        self,
        event_name: str,
        payload: Mapping[str, Any],
        immediate: bool = False,
    ) -> Awaitable[None] | None:
        event = TrackedEvent.create(event_name, payload, immediate=immediate)
        if immediate:
            return self.sink.send([event])
        try:
            self.emitter.emit(event)
        except asyncio.QueueFull:
            logger.warning(f"Telemetry queue full, dropped event {event_name!r}")
        return None


def is_supported(transport: Any) -> bool:
    """Whether ``transport`` actually delivers events."""
    return getattr(transport, "supported", True)
