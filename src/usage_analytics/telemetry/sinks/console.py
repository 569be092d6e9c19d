"""Console sink for development/debugging."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass

from ..events import TrackedEvent
from .base import TelemetrySink


@dataclass
class ConsoleSink(TelemetrySink):
    """Sink that prints events to stdout or stderr."""
    stream: str = "stdout"  # stdout | stderr

    format: str = "json"  # json | compact | pretty

    prefix: str = "[ANALYTICS] "

    async def send(self, events: list[TrackedEvent]) -> None:
        out = sys.stdout if self.stream == "stdout" else sys.stderr

        for event in events:
            print(f"{self.prefix}{self._format_event(event)}", file=out)

    def _format_event(self, event: TrackedEvent) -> str:
        if self.format == "json":
            return json.dumps(event.to_dict(), default=str)
        elif self.format == "compact":
            mode = "now" if event.immediate else "batch"
            pairs = " ".join(f"{k}={v}" for k, v in event.payload.items())
            return f"{event.name} [{mode}] {pairs}".rstrip()
        else:  # pretty
            return json.dumps(event.to_dict(), indent=2, default=str)
