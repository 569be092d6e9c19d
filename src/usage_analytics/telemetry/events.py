"""Telemetry event types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


PERFORMANCE_EVENT = "performance"


@dataclass(frozen=True, slots=True)
class TrackedEvent:
    """
    A single named event handed to the transport.

    Created per tracking call and discarded once delivered.
    """
    name: str
    payload: dict[str, Any] = field(default_factory=dict)

    # Requested delivery mode: batched (False) or sent right away (True)
    immediate: bool = False

    @classmethod
    def create(
        cls,
        name: str,
        values: Mapping[str, Any] | None = None,
        immediate: bool = False,
    ) -> TrackedEvent:
        """Factory that copies the caller's values so later mutation is not seen."""
        return cls(name=name, payload=dict(values or {}), immediate=immediate)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "payload": self.payload,
            "immediate": self.immediate,
        }


@dataclass(frozen=True, slots=True)
class TrackingEvent:
    """Descriptor form of an event, as produced by event streams."""
    type: str
    data: Mapping[str, Any] | None = None

    @classmethod
    def coerce(cls, event: TrackingEvent | Mapping[str, Any]) -> TrackingEvent:
        """Accept either a descriptor or a ``{"type": ..., "data": ...}`` mapping."""
        if isinstance(event, TrackingEvent):
            return event
        return cls(type=event["type"], data=event.get("data"))


def performance_payload(
    event_name: str,
    duration_ms: int,
    values: Mapping[str, Any] | None = None,
    exception: BaseException | None = None,
) -> dict[str, Any]:
    """
    Build the payload of a ``performance`` event.

    Base values come first so the fixed keys always win.
    """
    payload = dict(values or {})
    payload.update(
        duration=str(duration_ms),
        eventName=event_name,
        error="1" if exception is not None else "0",
        exception=describe_exception(exception) if exception is not None else "",
    )
    return payload


def describe_exception(exception: BaseException) -> str:
    """Render an exception as ``Type: message``."""
    message = str(exception)
    name = type(exception).__name__
    return f"{name}: {message}" if message else name
