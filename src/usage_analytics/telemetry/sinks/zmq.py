"""ZeroMQ sink for streaming tracked events off-process."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ..events import TrackedEvent
from .base import TelemetrySink


logger = logging.getLogger(__name__)


@dataclass
class ZmqSink(TelemetrySink):
    """
    Sink that publishes events on a ZeroMQ socket.

    Each message is ``"<topic> <json>"`` so SUB sockets can filter by
    topic prefix. Requires pyzmq (``pip install usage-analytics[zmq]``).

    Config:
        endpoint: ZMQ endpoint (e.g., "tcp://*:5556")
        topic: Topic prefix for messages
        socket_type: pub | push
        high_water_mark: Max queued messages before ZMQ drops
    """
    endpoint: str = "tcp://*:5556"
    topic: str = "analytics"
    socket_type: str = "pub"  # pub | push
    high_water_mark: int = 10000

    # Internal state
    _context: Any = field(default=None, init=False)
    _socket: Any = field(default=None, init=False)

    async def start(self) -> None:
        try:
            import zmq
            import zmq.asyncio
        except ImportError:
            raise RuntimeError("pyzmq required: pip install pyzmq")

        self._context = zmq.asyncio.Context()
        kind = zmq.PUB if self.socket_type == "pub" else zmq.PUSH
        self._socket = self._context.socket(kind)
        self._socket.set_hwm(self.high_water_mark)
        self._socket.bind(self.endpoint)

        logger.info(f"ZMQ sink started on {self.endpoint} ({self.socket_type})")

    async def stop(self) -> None:
        if self._socket:
            self._socket.close()
            self._socket = None
        if self._context:
            self._context.term()
            self._context = None

        logger.info("ZMQ sink stopped")

    async def send(self, events: list[TrackedEvent]) -> None:
        if not self._socket:
            raise RuntimeError("ZMQ sink not started")

        for event in events:
            await self._socket.send_string(f"{self.topic} {json.dumps(event.to_dict(), default=str)}")

    async def health_check(self) -> bool:
        return self._socket is not None
