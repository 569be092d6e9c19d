"""Exceptions raised by the analytics layer."""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for analytics errors."""


class SessionFinalizedError(AnalyticsError):
    """Raised when a timing session is finalized a second time."""
    def __init__(self, event_name: str, session_id: int):
        super().__init__(f"Timing session {event_name}#{session_id} already finalized")
        self.event_name = event_name
        self.session_id = session_id


class OperationFailure(AnalyticsError):
    """Wraps a failure value that is not an exception so it can be reported."""
    def __init__(self, reason: object):
        super().__init__(str(reason))
        self.reason = reason
