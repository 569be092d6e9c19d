"""Event tracking facade.

``AnalyticsContext`` owns everything a tracking call needs: the transport,
the session id counter, the clock, the random source used for sampling
and the optional profiler. Host code normally builds one at startup with
``usage_analytics.service.create_context`` and installs it as the default,
after which the module-level functions below can be used anywhere:

    from usage_analytics import track, track_timing

    track("file-opened", {"extension": "py"})
    tree = track_timing("parse-file", lambda: parse(path))
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import random
import threading
import time
from collections.abc import AsyncIterable
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

from .disposable import Disposable
from .ids import EventCounter
from .profiling import Profiler
from .results import Pending, classify_result
from .telemetry.events import TrackingEvent
from .timing import TimingSession
from .transport import NullTransport, Transport, is_supported


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AnalyticsContext:
    """Instrumentation context shared by every tracking call that uses it."""
    transport: Transport = field(default_factory=NullTransport)

    # Monotonic clock in seconds
    clock: Callable[[], float] = time.perf_counter

    # Uniform draws in [0, 1) for sampling
    rng: Callable[[], float] = random.random

    # Resolved once; None when profiling is off
    profiler: Profiler | None = None

    counter: EventCounter = field(default_factory=EventCounter)

    def is_track_supported(self) -> bool:
        return is_supported(self.transport)

    def track(self, event_name: str, values: Mapping[str, Any] | None = None) -> None:
        """
        Track a set of values against a named event.

        Delivery is batched and happens in the background. A failing
        transport is logged; the event is lost and nothing is raised.
        """
        try:
            self.transport.track(event_name, dict(values or {}), False)
        except Exception as e:
            logger.error(f"Failed to track event {event_name!r}: {e}")

    def track_immediate(
        self,
        event_name: str,
        values: Mapping[str, Any] | None = None,
    ) -> asyncio.Future | concurrent.futures.Future:
        """
        Same as ``track`` but sent right away.

        The transport is called before this returns. The returned future
        completes when delivery is confirmed and carries any transport
        failure; nothing is raised at call time. Inside an event loop it
        is an ``asyncio.Future`` to await. Without one it is a
        ``concurrent.futures.Future``, and a transport that needs a loop
        to finish delivery fails it with ``RuntimeError``.
        """
        try:
            pending = self.transport.track(event_name, dict(values or {}), True)
        except Exception as e:
            return _settled(error=e)

        if pending is None:
            return _settled()
        try:
            return asyncio.ensure_future(pending, loop=asyncio.get_running_loop())
        except RuntimeError as e:
            if asyncio.iscoroutine(pending):
                pending.close()
            logger.error(f"Immediate event {event_name!r} needs a running event loop")
            return _settled(error=e)

    def track_event(self, event: TrackingEvent | Mapping[str, Any]) -> None:
        """``track`` for a single ``{type, data}`` descriptor."""
        event = TrackingEvent.coerce(event)
        self.track(event.type, event.data)

    def track_events(self, events: Any) -> Disposable:
        """
        Track every descriptor produced by ``events``.

        ``events`` is either a push-based stream exposing
        ``subscribe(callback)`` or an async iterable, which is consumed in
        a task on the running loop. Malformed descriptors are logged and
        skipped. Disposing the returned handle stops tracking; a failing
        async source is logged and disposes the handle itself.
        """
        handle = Disposable()

        def forward(event):
            if handle.disposed:
                return
            try:
                event = TrackingEvent.coerce(event)
            except (KeyError, TypeError, AttributeError) as e:
                logger.error(f"Skipping malformed tracking event {event!r}: {e!r}")
                return
            self.track_event(event)

        subscribe = getattr(events, "subscribe", None)
        if callable(subscribe):
            handle.add(_unsubscriber(subscribe(forward)))
            return handle

        if isinstance(events, AsyncIterable):
            task = asyncio.get_running_loop().create_task(self._consume(events, forward))
            handle.add(task.cancel)
            task.add_done_callback(lambda t: _source_finished(t, handle))
            return handle

        raise TypeError(f"Cannot track events from {type(events).__name__}")

    async def _consume(self, events: AsyncIterable, forward: Callable[[Any], None]) -> None:
        async for event in events:
            forward(event)

    def track_sampled(
        self,
        event_name: str,
        sample_rate: float,
        values: Mapping[str, Any] | None = None,
    ) -> bool:
        """
        Track roughly one in every ``sample_rate`` calls.

        Rates of 1 or less always track. Returns whether the event was
        tracked.
        """
        if self.rng() * sample_rate <= 1:
            self.track(event_name, values)
            return True
        return False

    def start_tracking(self, event_name: str, values: Mapping[str, Any] | None = None) -> TimingSession:
        """Start a timing session the caller finalizes itself."""
        return TimingSession(self, event_name, values)

    def track_timing(
        self,
        event_name: str,
        operation: Callable[[], T],
        values: Mapping[str, Any] | None = None,
    ) -> T:
        """
        Report timing and outcome for a single operation.

        Usage:

            analytics.track_timing("my-package-some-long-operation", lambda: do_it())

        Returns (or raises) whatever the operation does. If the operation
        returns an awaitable, an ``asyncio.Future`` is returned instead and
        the session finishes when that awaitable settles; this needs a
        running event loop.
        """
        session = self.start_tracking(event_name, values)
        try:
            result = operation()
        except BaseException as error:
            session.on_error(error)
            raise

        outcome = classify_result(result)
        if isinstance(outcome, Pending):
            return _settle_later(session, outcome.awaitable)

        session.on_success()
        return outcome.value


def _settle_later(session: TimingSession, awaitable: Any) -> asyncio.Future:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError as error:
        session.on_error(error)
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise

    async def settle():
        try:
            value = await awaitable
        except BaseException as error:
            session.on_error(error)
            raise
        session.on_success()
        return value

    return loop.create_task(settle())


def _settled(error: BaseException | None = None) -> asyncio.Future | concurrent.futures.Future:
    """An already-completed future of the kind the caller can wait on."""
    try:
        future = asyncio.get_running_loop().create_future()
    except RuntimeError:
        future = concurrent.futures.Future()
    if error is None:
        future.set_result(None)
    else:
        future.set_exception(error)
    return future


def _source_finished(task: asyncio.Task, handle: Disposable) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Event source failed, stopped tracking it: {error!r}")
    handle.dispose()


def _unsubscriber(subscription: Any) -> Callable[[], object]:
    """Find the release action on whatever ``subscribe`` returned."""
    for name in ("unsubscribe", "dispose", "close"):
        action = getattr(subscription, name, None)
        if callable(action):
            return action
    if callable(subscription):
        return subscription
    raise TypeError(f"Subscription {subscription!r} cannot be released")


_default_context: AnalyticsContext | None = None
_default_lock = threading.Lock()


def get_default_context() -> AnalyticsContext:
    """The context used by the module-level functions (no-op until configured)."""
    global _default_context
    with _default_lock:
        if _default_context is None:
            _default_context = AnalyticsContext()
        return _default_context


def set_default_context(context: AnalyticsContext | None) -> None:
    """Install ``context`` as the default; ``None`` resets to a no-op context."""
    global _default_context
    with _default_lock:
        _default_context = context


def is_track_supported() -> bool:
    return get_default_context().is_track_supported()


def track(event_name: str, values: Mapping[str, Any] | None = None) -> None:
    get_default_context().track(event_name, values)


def track_immediate(
    event_name: str,
    values: Mapping[str, Any] | None = None,
) -> asyncio.Future | concurrent.futures.Future:
    return get_default_context().track_immediate(event_name, values)


def track_event(event: TrackingEvent | Mapping[str, Any]) -> None:
    get_default_context().track_event(event)


def track_events(events: Any) -> Disposable:
    return get_default_context().track_events(events)


def track_sampled(event_name: str, sample_rate: float, values: Mapping[str, Any] | None = None) -> bool:
    return get_default_context().track_sampled(event_name, sample_rate, values)


def start_tracking(event_name: str, values: Mapping[str, Any] | None = None) -> TimingSession:
    return get_default_context().start_tracking(event_name, values)


def track_timing(event_name: str, operation: Callable[[], T], values: Mapping[str, Any] | None = None) -> T:
    return get_default_context().track_timing(event_name, operation, values)
