"""JSONL file sink."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

from ..events import TrackedEvent
from .base import TelemetrySink


@dataclass
class FileSink(TelemetrySink):
    """
    Sink that appends events to a file, one JSON object per line.

    Each line carries the event plus the UTC time it was written.
    """
    path: str = "analytics.jsonl"
    encoding: str = "utf-8"

    # Internal state
    _file: IO[str] | None = field(default=None, init=False)

    async def start(self) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "a", encoding=self.encoding)

    async def stop(self) -> None:
        if self._file:
            self._file.close()
            self._file = None

    async def send(self, events: list[TrackedEvent]) -> None:
        if not self._file:
            await self.start()

        written_at = datetime.now(timezone.utc).isoformat()
        for event in events:
            record = {**event.to_dict(), "written_at": written_at}
            self._file.write(json.dumps(record, default=str) + "\n")

        self._file.flush()

    async def health_check(self) -> bool:
        return self._file is not None and not self._file.closed
