"""Session identifier generation."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class EventCounter:
    """
    Monotonic counter handing out timing session ids.

    Never decremented or reset; safe to share across threads.
    """
    _value: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def next(self) -> int:
        """Return the current value and advance the counter."""
        with self._lock:
            value = self._value
            self._value += 1
            return value

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        return self._value
