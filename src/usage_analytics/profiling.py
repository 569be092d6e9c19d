"""Optional performance timeline for external profiling tools.

Timing sessions drop a start mark when they begin and record a measure
spanning that mark when they finish. Nothing here affects the analytics
payload; the timeline only exists so a profiler attached to the process
can see where time went. When profiling is disabled the context holds no
profiler at all and sessions skip these calls.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Protocol


logger = logging.getLogger(__name__)


class Profiler(Protocol):
    """Mark/measure facility used by timing sessions."""

    def mark(self, name: str) -> None: ...

    def measure(self, name: str, start_mark: str) -> None: ...

    def clear_marks(self, name: str) -> None: ...

    def clear_measures(self, name: str) -> None: ...


@dataclass(frozen=True, slots=True)
class Measure:
    """A completed span on the timeline, in seconds of the timeline clock."""
    name: str
    start: float
    duration: float


@dataclass
class PerformanceTimeline:
    """
    In-process profiler timeline.

    Marks are named timestamps. Measures are spans from a mark to now.
    Both are bounded by ``max_entries``; the oldest measures are evicted
    first and new marks are refused once full.
    """
    max_entries: int = 10000
    clock: Callable[[], float] = time.perf_counter

    _marks: dict[str, float] = field(default_factory=dict, init=False)
    _measures: deque = field(default_factory=deque, init=False)

    def __post_init__(self):
        self._measures = deque(maxlen=self.max_entries)

    def mark(self, name: str) -> None:
        if len(self._marks) >= self.max_entries and name not in self._marks:
            logger.warning(f"Performance timeline full, ignoring mark {name!r}")
            return
        self._marks[name] = self.clock()

    def measure(self, name: str, start_mark: str) -> None:
        start = self._marks.get(start_mark)
        if start is None:
            logger.debug(f"Unknown start mark {start_mark!r} for measure {name!r}")
            return
        entry = Measure(name=name, start=start, duration=self.clock() - start)
        self._measures.append(entry)
        logger.debug(f"measure {name}: {entry.duration * 1000:.3f}ms")

    def clear_marks(self, name: str) -> None:
        self._marks.pop(name, None)

    def clear_measures(self, name: str) -> None:
        kept = [m for m in self._measures if m.name != name]
        self._measures.clear()
        self._measures.extend(kept)

    def get_marks(self) -> dict[str, float]:
        return dict(self._marks)

    def get_measures(self, name: str | None = None) -> list[Measure]:
        return [m for m in self._measures if name is None or m.name == name]
