"""Base sink interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..events import TrackedEvent


class TelemetrySink(ABC):
    """
    Abstract base class for telemetry sinks.

    Sinks receive lists of tracked events: full batches from the batcher,
    or a single event for immediate delivery.
    """

    @abstractmethod
    async def send(self, events: list[TrackedEvent]) -> None:
        """Deliver events to the destination; raise on failure."""
        ...

    async def start(self) -> None:
        """Initialize the sink (called on startup)."""
        pass

    async def stop(self) -> None:
        """Clean up the sink (called on shutdown)."""
        pass

    async def health_check(self) -> bool:
        """Check if the sink is healthy."""
        return True
