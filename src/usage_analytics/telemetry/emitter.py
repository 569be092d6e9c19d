"""Non-blocking telemetry emitter."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Union

from .events import TrackedEvent


logger = logging.getLogger(__name__)

Consumer = Callable[[TrackedEvent], Union[None, Awaitable[None]]]


@dataclass
class TelemetryEmitter:
    """
    Hands deferred events to consumers from a background task.

    ``emit`` only enqueues; ``process_loop`` pulls from the queue and calls
    each consumer, awaiting coroutine consumers. The queue belongs to the
    loop ``start`` ran on. Calls to ``emit`` from any other thread are
    handed to that loop with ``call_soon_threadsafe``.
    """
    max_queue_size: int = 10000

    # On a full queue: "drop" counts and discards, "raise" also propagates
    # asyncio.QueueFull to callers on the loop thread
    overflow_policy: str = "drop"

    # Internal state
    _queue: asyncio.Queue | None = field(default=None, init=False)
    _loop: asyncio.AbstractEventLoop | None = field(default=None, init=False)
    _consumers: list[Consumer] = field(default_factory=list, init=False)
    _stats: dict = field(default_factory=dict, init=False)

    def __post_init__(self):
        self._stats = {
            "emitted": 0,
            "delivered": 0,
            "dropped": 0,
            "errors": 0,
        }

    async def start(self) -> None:
        """Create the queue on the running loop."""
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self.max_queue_size)
        logger.info(f"Telemetry emitter started (max_queue={self.max_queue_size})")

    async def stop(self) -> None:
        """Deliver whatever is still queued."""
        if self._queue:
            while not self._queue.empty():
                await self._deliver(self._queue.get_nowait())
        logger.info(f"Telemetry emitter stopped. Stats: {self._stats}")

    def add_consumer(self, consumer: Consumer) -> None:
        """Register a plain callable or coroutine function as a consumer."""
        self._consumers.append(consumer)

    def emit(self, event: TrackedEvent) -> bool:
        """
        Queue an event without blocking.

        Returns False if the event was dropped. From a foreign thread the
        event is only scheduled, so True means "handed to the loop".
        """
        if self._queue is None:
            logger.warning(f"Telemetry emitter not started, dropping event {event.name!r}")
            self._stats["dropped"] += 1
            return False

        if self._on_loop_thread():
            return self._put(event)

        self._loop.call_soon_threadsafe(self._put_from_thread, event)
        return True

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _put(self, event: TrackedEvent) -> bool:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self._stats["dropped"] += 1
            if self.overflow_policy == "drop":
                return False
            raise
        self._stats["emitted"] += 1
        return True

    def _put_from_thread(self, event: TrackedEvent) -> None:
        # the emitting thread is gone by now; overflow can only be logged
        try:
            self._put(event)
        except asyncio.QueueFull:
            logger.warning(f"Telemetry queue full, dropped event {event.name!r}")

    async def process_loop(self) -> None:
        """Deliver queued events until cancelled; run as a background task."""
        if self._queue is None:
            raise RuntimeError("Emitter not started")

        logger.info("Telemetry processing loop started")

        while True:
            try:
                event = await self._queue.get()
            except asyncio.CancelledError:
                logger.info("Telemetry processing loop cancelled")
                break
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    async def _deliver(self, event: TrackedEvent) -> None:
        for consumer in self._consumers:
            try:
                result = consumer(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Consumer error for event {event.name!r}: {e}")
                self._stats["errors"] += 1
        self._stats["delivered"] += 1

    @property
    def queue_depth(self) -> int:
        return self._queue.qsize() if self._queue else 0

    @property
    def stats(self) -> dict:
        return {
            **self._stats,
            "queue_depth": self.queue_depth,
            "consumers": len(self._consumers),
        }
