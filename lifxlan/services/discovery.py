"""Device discovery by GetService broadcast."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import tenacity

from ..config.model import ClientConfig
from ..device import Device
from ..protocol.frame import MalformedMessageError, build_message, parse_message
from ..protocol.products import DEFAULT_REGISTRY, ProductRegistry
from ..protocol.protocol import AckResFlag, MessageType, ServiceType
from ..protocol.structures import StateServicePayload
from ..protocol.target import ALL_DEVICES
from ..transport.udp import DatagramConnection, ShortWriteError

logger = logging.getLogger("lifxlan.service.discovery")


def _log_broadcast_retry(retry_state: tenacity.RetryCallState) -> None:
    logger.warning(
        "Discovery broadcast attempt %d failed; retrying in %.2fs",
        retry_state.attempt_number,
        retry_state.next_action.sleep if retry_state.next_action else 0,
    )


def build_get_service() -> bytes:
    """Tagged GetService for every device, source and sequence zero."""
    return build_message(
        tagged=True,
        source=0,
        target=ALL_DEVICES,
        flags=AckResFlag.NONE,
        sequence=0,
        message_type=MessageType.GET_SERVICE,
    )


async def _broadcast(conn: DatagramConnection, message: bytes, config: ClientConfig) -> None:
    retryer = tenacity.AsyncRetrying(
        stop=tenacity.stop_after_attempt(config.broadcast_attempts),
        wait=tenacity.wait_incrementing(
            start=config.broadcast_retry_interval,
            increment=config.broadcast_retry_interval,
        ),
        retry=tenacity.retry_if_exception_type(OSError) & tenacity.retry_if_not_exception_type(ShortWriteError),
        before_sleep=_log_broadcast_retry,
        reraise=True,
    )
    async for attempt in retryer:
        with attempt:
            written = await conn.write(message, (config.broadcast_host, config.port))
            if written < len(message):
                raise ShortWriteError(written, len(message))


async def discover(
    config: ClientConfig | None = None,
    *,
    timeout: float | None = None,
    registry: ProductRegistry = DEFAULT_REGISTRY,
) -> AsyncIterator[Device]:
    """Broadcast GetService and yield a :class:`Device` per UDP responder.

    Replies are deduplicated by target. Iteration ends once *timeout*
    (default ``config.discovery_timeout``) elapses; stop iterating earlier to
    end discovery sooner.
    """
    config = config or ClientConfig()
    if timeout is None:
        timeout = config.discovery_timeout

    seen: set[int] = set()
    conn = await DatagramConnection.listen(read_buffer_size=config.read_buffer_size)
    try:
        await _broadcast(conn, build_get_service(), config)
        logger.debug("Broadcast GetService to %s:%d", config.broadcast_host, config.port)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            try:
                data, (host, _) = await asyncio.wait_for(conn.read_from(), min(config.read_timeout, remaining))
            except TimeoutError:
                continue

            try:
                response = parse_message(data)
            except MalformedMessageError as exc:
                logger.debug("Ignoring malformed datagram from %s: %s", host, exc)
                continue
            if response.message_type != MessageType.STATE_SERVICE:
                continue

            try:
                service = StateServicePayload.decode(response.payload)
            except ValueError as exc:
                logger.debug("Ignoring StateService from %s: %s", host, exc)
                continue
            if service.service != ServiceType.UDP:
                continue
            if response.target.value in seen:
                continue
            seen.add(response.target.value)

            logger.info("Discovered %s at %s:%d", response.target, host, service.port)
            yield Device(
                host,
                service.port,
                target=response.target,
                service=ServiceType.UDP,
                registry=registry,
                config=config,
            )
    finally:
        conn.close()
