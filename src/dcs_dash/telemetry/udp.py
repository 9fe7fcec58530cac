"""UDP ingestion of exporter datagrams.

:class:`TelemetryUDPReceiver` wraps an asyncio datagram endpoint and queues
raw payloads; :class:`IngestionTask` drains that queue through the decoder
and the normaliser.  The only suspension point of the ingestion loop is
:meth:`TelemetryUDPReceiver.recv`, which is where cancellation is observed.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from collections import deque
from types import TracebackType
from typing import Optional, Tuple

from .decoder import MalformedPacket, decode_frame, split_frames
from .normalizer import Normalizer

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_QUEUE_SIZE",
    "IngestionTask",
    "SocketBindFailure",
    "TelemetryUDPReceiver",
]


logger = logging.getLogger(__name__)


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5010
DEFAULT_QUEUE_SIZE = 256


class SocketBindFailure(OSError):
    """Raised when the telemetry listener cannot bind its UDP socket."""

    def __init__(self, host: str, port: int, reason: BaseException) -> None:
        super().__init__(f"Unable to bind telemetry listener on {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class _ReceiverProtocol(asyncio.DatagramProtocol):
    def __init__(self, receiver: "TelemetryUDPReceiver") -> None:
        self._receiver = receiver

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._receiver._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:  # pragma: no cover - platform specific
        self._receiver._on_error(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self._receiver._connection_lost(exc)


class TelemetryUDPReceiver:
    """Asynchronous UDP listener delivering raw datagram payloads."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._host = host
        self._requested_port = int(port)
        self._queue_size = max(int(queue_size), 1)
        self._pending: deque[bytes] = deque()
        self._transport: asyncio.DatagramTransport | None = None
        self._address: Tuple[str, int] = ("", 0)
        self._waiter: asyncio.Future[None] | None = None
        self._closed = False
        self._datagrams = 0
        self._dropped = 0
        self._frames = 0
        self._accepted = 0
        self._malformed = 0

    @classmethod
    async def create(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> "TelemetryUDPReceiver":
        self = cls(host=host, port=port, queue_size=queue_size)
        await self.start()
        return self

    async def start(self) -> None:
        if self._transport is not None:
            return
        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _ReceiverProtocol(self),
                local_addr=(self._host, self._requested_port),
                family=socket.AF_INET,
            )
        except OSError as exc:
            raise SocketBindFailure(self._host, self._requested_port, exc) from exc
        self._transport = transport
        sockname = transport.get_extra_info("sockname")
        if isinstance(sockname, tuple) and len(sockname) >= 2:
            self._address = (str(sockname[0]), int(sockname[1]))
        else:  # pragma: no cover
            self._address = (self._host, self._requested_port)
        logger.info(
            "Telemetry listener bound.",
            extra={
                "event": "ingest.bound",
                "host": self._address[0],
                "port": self._address[1],
            },
        )

    async def __aenter__(self) -> "TelemetryUDPReceiver":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def address(self) -> Tuple[str, int]:
        return self._address

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def statistics(self) -> dict[str, int]:
        """Return packet accounting collected by the receiver."""

        return {
            "datagrams": self._datagrams,
            "dropped": self._dropped,
            "frames": self._frames,
            "accepted": self._accepted,
            "malformed": self._malformed,
        }

    def record_frame(self, *, accepted: bool) -> None:
        self._frames += 1
        if accepted:
            self._accepted += 1
        else:
            self._malformed += 1

    async def recv(self) -> Optional[bytes]:
        """Wait for the next datagram; return ``None`` once closed."""

        while not self._pending:
            if self._closed:
                return None
            loop = asyncio.get_running_loop()
            self._waiter = loop.create_future()
            try:
                await self._waiter
            finally:
                self._waiter = None
        return self._pending.popleft()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        transport = self._transport
        self._transport = None
        if transport is not None:
            transport.close()
        self._wake()

    def _on_datagram(self, payload: bytes, source: tuple[str, int]) -> None:
        if self._closed or not payload:
            return
        self._datagrams += 1
        if len(self._pending) >= self._queue_size:
            self._pending.popleft()
            self._dropped += 1
            logger.debug(
                "Telemetry queue full; discarding oldest datagram.",
                extra={
                    "event": "ingest.queue_overflow",
                    "queue_size": self._queue_size,
                    "source_host": source[0],
                },
            )
        self._pending.append(bytes(payload))
        self._wake()

    def _on_error(self, exc: Exception) -> None:
        logger.warning(
            "Telemetry socket reported an error.",
            extra={"event": "ingest.socket_error", "error": str(exc)},
        )

    def _connection_lost(self, _exc: Exception | None) -> None:
        self._closed = True
        self._transport = None
        self._wake()

    def _wake(self) -> None:
        waiter = self._waiter
        if waiter is not None and not waiter.done():
            waiter.set_result(None)


class IngestionTask:
    """Drive datagrams from ``receiver`` through ``normalizer``."""

    def __init__(self, receiver: TelemetryUDPReceiver, normalizer: Normalizer) -> None:
        self.receiver = receiver
        self.normalizer = normalizer

    def process(self, payload: bytes) -> int:
        """Decode and apply every frame in ``payload``; return accepted count."""

        accepted = 0
        for frame in split_frames(payload):
            try:
                sample = decode_frame(frame)
            except MalformedPacket as exc:
                self.receiver.record_frame(accepted=False)
                logger.debug(
                    "Dropping malformed telemetry frame.",
                    extra={
                        "event": "ingest.malformed",
                        "reason": str(exc),
                        "size": len(frame),
                    },
                )
                continue
            self.normalizer.apply(sample)
            self.receiver.record_frame(accepted=True)
            accepted += 1
        return accepted

    async def run(self) -> None:
        try:
            while True:
                payload = await self.receiver.recv()
                if payload is None:
                    break
                self.process(payload)
        finally:
            logger.info(
                "Telemetry ingestion stopped.",
                extra={"event": "ingest.stopped", **self.receiver.statistics},
            )
