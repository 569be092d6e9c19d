"""Batching worker that groups deferred events before they reach a sink."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from .events import TrackedEvent


logger = logging.getLogger(__name__)

BatchSink = Callable[[list[TrackedEvent]], Awaitable[None]]


@dataclass
class TelemetryBatcher:
    """
    Collects tracked events and sends them to a sink as a list.

    A batch goes out when it reaches ``batch_size``, when ``timer_loop``
    finds it older than ``flush_interval_seconds``, or on ``flush``/``stop``.
    A batch the sink rejects is logged, counted and dropped.
    """
    batch_size: int = 1000
    flush_interval_seconds: float = 1.0
    sink: BatchSink | None = None

    _pending: list[TrackedEvent] = field(default_factory=list, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _oldest: float | None = field(default=None, init=False)
    _stats: dict = field(default_factory=dict, init=False)

    def __post_init__(self):
        self._stats = {"batches_sent": 0, "events_sent": 0, "flush_errors": 0}

    async def add(self, event: TrackedEvent) -> None:
        async with self._lock:
            if not self._pending:
                self._oldest = time.monotonic()
            self._pending.append(event)
            if len(self._pending) >= self.batch_size:
                await self._send_pending()

    async def flush(self) -> None:
        async with self._lock:
            await self._send_pending()

    async def _send_pending(self) -> None:
        # lock held by caller
        if not self._pending:
            return
        batch, self._pending, self._oldest = self._pending, [], None

        if self.sink is None:
            logger.warning(f"No sink configured, discarding batch of {len(batch)}")
            return

        try:
            await self.sink(batch)
        except Exception as e:
            logger.error(f"Failed to flush telemetry batch of {len(batch)}: {e}")
            self._stats["flush_errors"] += 1
            return
        self._stats["batches_sent"] += 1
        self._stats["events_sent"] += len(batch)

    def _due(self) -> bool:
        return self._oldest is not None and time.monotonic() - self._oldest >= self.flush_interval_seconds

    async def timer_loop(self) -> None:
        """Flush batches that waited too long; runs until cancelled, then flushes."""
        logger.info(f"Telemetry batcher timer started (interval={self.flush_interval_seconds}s)")
        try:
            while True:
                await asyncio.sleep(self.flush_interval_seconds)
                async with self._lock:
                    if self._due():
                        await self._send_pending()
        except asyncio.CancelledError:
            logger.info("Telemetry batcher timer cancelled")
        await self.flush()

    async def stop(self) -> None:
        await self.flush()
        logger.info(f"Telemetry batcher stopped. Stats: {self._stats}")

    @property
    def buffer_size(self) -> int:
        return len(self._pending)

    @property
    def stats(self) -> dict:
        return {**self._stats, "buffer_size": self.buffer_size}


def create_batched_consumer(batcher: TelemetryBatcher) -> Callable[[TrackedEvent], Awaitable[None]]:
    """Emitter consumer that feeds each event into ``batcher``."""
    async def consumer(event: TrackedEvent) -> None:
        await batcher.add(event)

    return consumer
