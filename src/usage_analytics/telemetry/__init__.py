"""Reference transport - non-blocking emitter, batcher and sinks."""

from .events import TrackedEvent, TrackingEvent, PERFORMANCE_EVENT
from .emitter import TelemetryEmitter
from .batcher import TelemetryBatcher, create_batched_consumer

__all__ = [
    "TrackedEvent",
    "TrackingEvent",
    "PERFORMANCE_EVENT",
    "TelemetryEmitter",
    "TelemetryBatcher",
    "create_batched_consumer",
]
