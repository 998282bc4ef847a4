"""Asyncio UDP transport for the LIFX LAN client.

A :class:`DatagramConnection` wraps an asyncio datagram endpoint. Received
datagrams are queued by the protocol and handed out one per ``read`` call;
the caller bounds each read (see :func:`lifxlan.services.flow.read_next_response`).
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import Protocol

from ..const import DEFAULT_READ_BUFFER_SIZE
from ..util import log_hexdump

logger = logging.getLogger("lifxlan.transport")

Address = tuple[str, int]


class ShortWriteError(OSError):
    """The transport accepted fewer bytes than the datagram holds."""

    def __init__(self, written: int, total: int) -> None:
        super().__init__(f"only wrote {written} out of {total} bytes")
        self.written = written
        self.total = total


class Connection(Protocol):
    """What the protocol layer needs from a datagram connection."""

    async def write(self, data: bytes) -> int: ...

    async def read(self) -> bytes: ...

    def close(self) -> None: ...


class DatagramReadProtocol(asyncio.DatagramProtocol):
    def __init__(self, read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE) -> None:
        self._read_buffer_size = read_buffer_size
        self.queue: asyncio.Queue[tuple[bytes, Address] | Exception] = asyncio.Queue()
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: Address) -> None:
        log_hexdump(logger, logging.DEBUG, f"RX {addr[0]}:{addr[1]}", data)
        # Oversized datagrams are cut like a fixed-size socket read buffer would.
        self.queue.put_nowait((data[: self._read_buffer_size], addr))

    def error_received(self, exc: Exception) -> None:
        logger.warning("UDP error received: %s", exc)
        self.queue.put_nowait(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self.queue.put_nowait(exc or ConnectionError("connection closed"))


class DatagramConnection:
    """A UDP endpoint, either connected to one device or bound for broadcast."""

    def __init__(
        self,
        transport: asyncio.DatagramTransport,
        protocol: DatagramReadProtocol,
        remote: Address | None = None,
    ) -> None:
        self._transport = transport
        self._protocol = protocol
        self._remote = remote

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int,
        *,
        read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE,
    ) -> DatagramConnection:
        """Open a UDP socket connected to ``host:port``."""
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            lambda: DatagramReadProtocol(read_buffer_size),
            remote_addr=(host, port),
        )
        logger.debug("Dialed %s:%d", host, port)
        return cls(transport, protocol, (host, port))

    @classmethod
    async def listen(
        cls,
        *,
        host: str = "0.0.0.0",
        port: int = 0,
        allow_broadcast: bool = True,
        read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE,
    ) -> DatagramConnection:
        """Bind an unconnected UDP socket, broadcast capable by default."""
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            lambda: DatagramReadProtocol(read_buffer_size),
            local_addr=(host, port),
            family=socket.AF_INET,
            allow_broadcast=allow_broadcast,
        )
        logger.debug("Listening on %s", transport.get_extra_info("sockname"))
        return cls(transport, protocol)

    @property
    def closed(self) -> bool:
        return self._transport.is_closing()

    async def write(self, data: bytes, addr: Address | None = None) -> int:
        """Send one datagram and return the number of bytes handed to the OS."""
        if self._transport.is_closing():
            raise ConnectionError("connection closed")
        destination = addr if self._remote is None else None
        if self._remote is None and destination is None:
            raise ValueError("Unconnected endpoint needs a destination address")
        self._transport.sendto(data, destination)
        log_hexdump(logger, logging.DEBUG, "TX", data)
        # Datagram transports send the whole datagram or raise; callers still
        # compare against len(data) because Connection allows short writes.
        return len(data)

    async def read_from(self) -> tuple[bytes, Address]:
        """Wait for the next datagram. Socket errors are raised here."""
        if self._transport.is_closing() and self._protocol.queue.empty():
            raise ConnectionError("connection closed")
        item = await self._protocol.queue.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def read(self) -> bytes:
        data, _ = await self.read_from()
        return data

    def close(self) -> None:
        if not self._transport.is_closing():
            self._transport.close()

    async def __aenter__(self) -> DatagramConnection:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
