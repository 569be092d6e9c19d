"""Shared fixtures for usage analytics tests."""

from dataclasses import dataclass, field

import pytest

from usage_analytics.profiling import PerformanceTimeline
from usage_analytics.tracker import AnalyticsContext, set_default_context


@dataclass
class RecordingTransport:
    """Transport double that records every call."""
    calls: list = field(default_factory=list)
    immediate_result: object = None

    def track(self, event_name, payload, immediate=False):
        self.calls.append((event_name, dict(payload), immediate))
        if immediate:
            return self.immediate_result
        return None

    def events(self, name=None):
        return [c for c in self.calls if name is None or c[0] == name]

    def performance(self):
        return [payload for event_name, payload, _ in self.calls if event_name == "performance"]


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context(transport, clock) -> AnalyticsContext:
    """Context with recording transport and fake clock, no profiler."""
    return AnalyticsContext(transport=transport, clock=clock)


@pytest.fixture
def timeline(clock) -> PerformanceTimeline:
    return PerformanceTimeline(max_entries=100, clock=clock)


@pytest.fixture
def profiled_context(transport, clock, timeline) -> AnalyticsContext:
    return AnalyticsContext(transport=transport, clock=clock, profiler=timeline)


@pytest.fixture(autouse=True)
def reset_default_context():
    """Keep the module-level default context isolated per test."""
    set_default_context(None)
    yield
    set_default_context(None)
