"""Runtime wiring: build the reference pipeline and an analytics context."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .config import AnalyticsConfig
from .profiling import PerformanceTimeline
from .telemetry.batcher import TelemetryBatcher, create_batched_consumer
from .telemetry.emitter import TelemetryEmitter
from .telemetry.sinks.base import TelemetrySink
from .telemetry.sinks.console import ConsoleSink
from .telemetry.sinks.file import FileSink
from .telemetry.sinks.zmq import ZmqSink
from .tracker import AnalyticsContext
from .transport import EmitterTransport, NullTransport


logger = logging.getLogger(__name__)


def create_sink(config: AnalyticsConfig) -> TelemetrySink:
    """Create the sink named by ``telemetry.sink_type``."""
    sink_type = config.telemetry.sink_type
    sink_config = config.telemetry.sink_config

    if sink_type == "console":
        return ConsoleSink(**sink_config)
    elif sink_type == "file":
        return FileSink(**sink_config)
    elif sink_type == "zmq":
        return ZmqSink(**sink_config)

    logger.warning(f"Unknown sink type {sink_type!r}, falling back to console")
    return ConsoleSink()


def create_telemetry(config: AnalyticsConfig) -> tuple[TelemetryEmitter, TelemetryBatcher, TelemetrySink]:
    """Create emitter, batcher and sink, wired together."""
    emitter = TelemetryEmitter(
        max_queue_size=config.telemetry.max_queue_size,
        overflow_policy=config.telemetry.overflow_policy,
    )
    sink = create_sink(config)

    batcher = TelemetryBatcher(
        batch_size=config.telemetry.batch_size,
        flush_interval_seconds=config.telemetry.flush_interval_seconds,
        sink=sink.send,
    )

    emitter.add_consumer(create_batched_consumer(batcher))

    return emitter, batcher, sink


@dataclass
class AnalyticsRuntime:
    """
    Owns the background tasks of the reference pipeline.

    ``start`` must run inside the event loop that will serve tracking
    calls; ``stop`` cancels the loops, then drains the queue and flushes
    the batcher so nothing accepted is lost.
    """
    emitter: TelemetryEmitter
    batcher: TelemetryBatcher
    sink: TelemetrySink

    _tasks: list[asyncio.Task] = field(default_factory=list, init=False)

    @classmethod
    def from_config(cls, config: AnalyticsConfig) -> AnalyticsRuntime:
        emitter, batcher, sink = create_telemetry(config)
        return cls(emitter=emitter, batcher=batcher, sink=sink)

    async def start(self) -> None:
        await self.sink.start()
        await self.emitter.start()
        self._tasks = [
            asyncio.create_task(self.emitter.process_loop()),
            asyncio.create_task(self.batcher.timer_loop()),
        ]
        logger.info("Analytics runtime started")

    async def stop(self) -> None:
        logger.info("Shutting down analytics runtime...")

        for task in self._tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []

        await self.emitter.stop()
        await self.batcher.stop()
        await self.sink.stop()

        logger.info("Analytics runtime stopped")

    @property
    def stats(self) -> dict:
        return {
            "emitter": self.emitter.stats,
            "batcher": self.batcher.stats,
        }


def create_context(config: AnalyticsConfig, runtime: AnalyticsRuntime | None = None) -> AnalyticsContext:
    """
    Build an analytics context from config.

    Tracking is a no-op when telemetry is disabled or no runtime is given.
    """
    if config.telemetry.enabled and runtime is not None:
        transport = EmitterTransport(emitter=runtime.emitter, sink=runtime.sink)
    else:
        transport = NullTransport()

    profiler = None
    if config.profiling.enabled:
        profiler = PerformanceTimeline(max_entries=config.profiling.max_entries)

    return AnalyticsContext(transport=transport, profiler=profiler)
