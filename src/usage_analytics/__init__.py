"""
Usage Analytics - in-process instrumentation facade

Emits structured usage and performance events toward a delivery pipeline:
- Deferred, immediate and sampled event tracking
- Timing sessions that report duration and outcome of an operation
- Timing of sync and async operations through one call
- Forwarding of event streams into tracking
"""

from .errors import AnalyticsError, OperationFailure, SessionFinalizedError
from .telemetry.events import PERFORMANCE_EVENT, TrackedEvent, TrackingEvent
from .timing import SessionState, TimingSession
from .tracker import (
    AnalyticsContext,
    get_default_context,
    is_track_supported,
    set_default_context,
    start_tracking,
    track,
    track_event,
    track_events,
    track_immediate,
    track_sampled,
    track_timing,
)

__version__ = "0.1.0"

__all__ = [
    "AnalyticsContext",
    "AnalyticsError",
    "OperationFailure",
    "PERFORMANCE_EVENT",
    "SessionFinalizedError",
    "SessionState",
    "TimingSession",
    "TrackedEvent",
    "TrackingEvent",
    "get_default_context",
    "is_track_supported",
    "set_default_context",
    "start_tracking",
    "track",
    "track_event",
    "track_events",
    "track_immediate",
    "track_sampled",
    "track_timing",
]
