"""Request/acknowledgement flow over a datagram connection.

UDP gives no ordering or delivery guarantee, so every reader here correlates
replies by ``(source, sequence)`` and drops everything else. Each read is
bounded by a short ``read_timeout``; hitting that bound only means "keep
waiting", never failure.

Only one of these readers may consume a given connection at a time: each one
discards datagrams it does not want, so concurrent readers would steal each
other's replies. This is a caller contract and is not enforced with a lock.

Cancellation of the calling task propagates unchanged. The ``timeout``
keyword gives an overall deadline instead; on expiry :func:`wait_for_acks`
reports partial progress through :class:`WaitForAcksError` and the response
readers raise :class:`TimeoutError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Container, Iterable

from ..const import DEFAULT_READ_TIMEOUT
from ..protocol.frame import MalformedMessageError, Response, parse_message
from ..protocol.protocol import MessageType, message_name
from ..protocol.structures import StateUnhandledPayload
from ..transport.udp import Connection

logger = logging.getLogger("lifxlan.service.flow")


class WaitForAcksError(RuntimeError):
    """Not every requested ack arrived.

    ``received`` and ``total`` list sequence numbers; ``cause`` is what ended
    the wait (a :class:`TimeoutError`, a socket error, a malformed datagram).
    """

    def __init__(self, received: Iterable[int], total: Iterable[int], cause: BaseException) -> None:
        self.received: tuple[int, ...] = tuple(received)
        self.total: tuple[int, ...] = tuple(total)
        self.cause = cause
        super().__init__(f"{len(self.received)} of {len(self.total)} ack(s) received: {cause}")


class UnhandledMessageError(RuntimeError):
    """The device answered StateUnhandled: it does not support the request."""

    def __init__(self, message_type: int) -> None:
        super().__init__(f"unhandled message: {message_name(message_type)}")
        self.message_type = message_type


def _deadline(timeout: float | None) -> float | None:
    if timeout is None:
        return None
    return asyncio.get_running_loop().time() + timeout


async def _read_until(conn: Connection, deadline: float | None, read_timeout: float) -> Response:
    loop = asyncio.get_running_loop()
    while True:
        window = read_timeout
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise TimeoutError("deadline exceeded while waiting for a response")
            window = min(window, remaining)
        try:
            data = await asyncio.wait_for(conn.read(), window)
        except TimeoutError:
            continue
        return parse_message(data)


async def read_next_response(
    conn: Connection,
    *,
    timeout: float | None = None,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
) -> Response:
    """Return the next well-formed message on *conn*, whatever it is.

    Callers filter by sequence, source and message type themselves. A
    malformed datagram raises :class:`MalformedMessageError`.
    """
    return await _read_until(conn, _deadline(timeout), read_timeout)


async def wait_for_acks(
    conn: Connection,
    source: int,
    sequences: Iterable[int],
    *,
    timeout: float | None = None,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
) -> None:
    """Block until every sequence in *sequences* has been acknowledged.

    Acknowledgements from another source, for sequences outside the pending
    set, and any other message type are discarded. An empty set returns at
    once.
    """
    total = list(dict.fromkeys(sequences))
    pending = set(total)
    received: list[int] = []
    if not pending:
        return

    deadline = _deadline(timeout)
    while pending:
        try:
            response = await _read_until(conn, deadline, read_timeout)
        except (TimeoutError, OSError, MalformedMessageError) as exc:
            logger.debug("Ack wait ended with %d of %d received: %s", len(received), len(total), exc)
            raise WaitForAcksError(received, total, exc) from exc

        if response.source != source or response.message_type != MessageType.ACKNOWLEDGEMENT:
            continue
        if response.sequence in pending:
            pending.discard(response.sequence)
            received.append(response.sequence)


async def read_response(
    conn: Connection,
    *,
    source: int,
    sequence: int,
    message_types: Container[int],
    timeout: float | None = None,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
) -> Response:
    """Wait for the reply to ``(source, sequence)`` with one of *message_types*.

    A StateUnhandled reply to the same request raises
    :class:`UnhandledMessageError`.
    """
    deadline = _deadline(timeout)
    while True:
        response = await _read_until(conn, deadline, read_timeout)
        if response.sequence != sequence or response.source != source:
            continue
        if response.message_type == MessageType.STATE_UNHANDLED:
            unhandled = StateUnhandledPayload.decode(response.payload)
            raise UnhandledMessageError(unhandled.unhandled_type)
        if response.message_type in message_types:
            return response
        logger.debug("Ignoring %s while waiting for sequence %d", message_name(response.message_type), sequence)
