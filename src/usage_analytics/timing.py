"""Timing sessions: one in-flight timed operation each."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from .errors import OperationFailure, SessionFinalizedError
from .telemetry.events import PERFORMANCE_EVENT, performance_payload

if TYPE_CHECKING:
    from .tracker import AnalyticsContext


logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    RUNNING = "running"
    FINALIZED = "finalized"


class TimingSession:
    """
    Measures one operation and reports it as a ``performance`` event.

    The clock starts on construction. Exactly one of ``on_success`` or
    ``on_error`` must be called afterwards; a second call raises
    ``SessionFinalizedError`` and tracks nothing.

    Also usable as a context manager:

        with analytics.start_tracking("index-rebuild"):
            rebuild()
    """

    def __init__(
        self,
        context: AnalyticsContext,
        event_name: str,
        values: Mapping[str, Any] | None = None,
    ):
        self._context = context
        self._event_name = event_name
        self._values = dict(values or {})
        self._session_id = context.counter.next()
        self._start_mark = f"{event_name}_{self._session_id}_start"
        self._state = SessionState.RUNNING
        self._start_time = context.clock()
        if context.profiler is not None:
            context.profiler.mark(self._start_mark)

    @property
    def event_name(self) -> str:
        return self._event_name

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def finalized(self) -> bool:
        return self._state is SessionState.FINALIZED

    def on_success(self) -> None:
        self._finalize(None)

    def on_error(self, error: object) -> None:
        if not isinstance(error, BaseException):
            error = OperationFailure(error)
        self._finalize(error)

    def _finalize(self, exception: BaseException | None) -> None:
        if self._state is SessionState.FINALIZED:
            logger.error(f"Timing session {self._start_mark} finalized twice")
            raise SessionFinalizedError(self._event_name, self._session_id)
        self._state = SessionState.FINALIZED

        duration_ms = max(0, round((self._context.clock() - self._start_time) * 1000))

        profiler = self._context.profiler
        if profiler is not None:
            # surface the span on the timeline, then drop it so entries stay bounded
            profiler.measure(self._event_name, self._start_mark)
            profiler.clear_marks(self._start_mark)
            profiler.clear_measures(self._event_name)

        self._context.track(
            PERFORMANCE_EVENT,
            performance_payload(self._event_name, duration_ms, self._values, exception),
        )

    def __enter__(self) -> TimingSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            self.on_success()
        else:
            self.on_error(exc)

    def __repr__(self) -> str:
        return f"TimingSession({self._event_name!r}, id={self._session_id}, state={self._state.value})"
