"""Base LIFX device: identity, sequencing, sending and device-level requests.

Capability wrappers (:mod:`lifxlan.light`, :mod:`lifxlan.tile`,
:mod:`lifxlan.relay`) hold a reference to a :class:`Device` and forward
identity operations to it rather than subclassing it.

Every request method accepts an optional pre-dialed ``conn``. Without one a
connection is dialed for the call and closed before it returns; pre-dial when
issuing many calls to the same device.
"""

from __future__ import annotations

import asyncio
import logging
import os
import random
import threading
from collections.abc import AsyncIterator, Container
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from .config.model import ClientConfig
from .const import DEFAULT_PORT, KELVIN_MAX, KELVIN_MIN
from .protocol.frame import Response, build_message
from .protocol.products import DEFAULT_REGISTRY, Features, Product, ProductRegistry
from .protocol.protocol import (
    ECHO_PAYLOAD_LENGTH,
    UINT8_MASK,
    UINT32_MAX,
    AckResFlag,
    MessageType,
    ServiceType,
    message_name,
)
from .protocol.structures import (
    BaseStruct,
    Color,
    EchoPayload,
    HardwareVersion,
    HostFirmware,
    LabelPayload,
    PowerPayload,
)
from .protocol.target import ALL_DEVICES, Target
from .services.flow import read_response, wait_for_acks
from .transport.udp import Connection, DatagramConnection, ShortWriteError

logger = logging.getLogger("lifxlan.device")

EMPTY_FIRMWARE = (0, 0)


def random_source() -> int:
    """Pick a session source: uniform over the non-zero 32-bit values."""
    source = 0
    while source == 0:
        source = random.randint(1, UINT32_MAX)
    return source


class Device:
    """A LIFX device reachable at ``host:port``."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        target: Target = ALL_DEVICES,
        service: ServiceType | int = ServiceType.UDP,
        registry: ProductRegistry = DEFAULT_REGISTRY,
        config: ClientConfig | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.target = target
        self.service = service
        self.registry = registry
        self.config = config or ClientConfig()

        self._source = random_source()
        self._sequence = 0
        self._sequence_lock = threading.Lock()

        # Cached by the get_* requests and by the wrappers.
        self.label: str | None = None
        self.hardware_version: HardwareVersion | None = None
        self.firmware: HostFirmware | None = None

    def __str__(self) -> str:
        if self.label:
            return f"{self.label}({self.target})"
        return f"Device({self.target})"

    def __repr__(self) -> str:
        return f"<Device {self.target} at {self.host}:{self.port} source={self._source:#010x}>"

    @property
    def source(self) -> int:
        return self._source

    @property
    def device(self) -> Device:
        return self

    def next_sequence(self) -> int:
        """Advance the 8-bit sequence counter; the first value is 1."""
        with self._sequence_lock:
            self._sequence = (self._sequence + 1) & UINT8_MASK
            return self._sequence

    # --- Connections ---

    async def dial(self) -> DatagramConnection:
        if self.service != ServiceType.UDP:
            raise ValueError(f"unknown device service type: {self.service}")
        return await DatagramConnection.connect(
            self.host,
            self.port,
            read_buffer_size=self.config.read_buffer_size,
        )

    @asynccontextmanager
    async def connection(self, conn: Connection | None = None) -> AsyncIterator[Connection]:
        """Yield *conn*, or a freshly dialed connection closed on exit."""
        if conn is not None:
            yield conn
            return
        dialed = await self.dial()
        try:
            yield dialed
        finally:
            dialed.close()

    # --- Sending ---

    async def send(
        self,
        conn: Connection,
        flags: AckResFlag | int,
        message_type: int,
        payload: BaseStruct | bytes | None = None,
    ) -> int:
        """Frame and write one message; return the sequence number it used."""
        if isinstance(payload, BaseStruct):
            body = payload.encode()
        else:
            body = bytes(payload or b"")
        sequence = self.next_sequence()
        message = build_message(
            tagged=False,
            source=self._source,
            target=self.target,
            flags=flags,
            sequence=sequence,
            message_type=message_type,
            payload=body,
        )
        written = await conn.write(message)
        if written < len(message):
            raise ShortWriteError(written, len(message))
        logger.debug("Sent %s seq=%d to %s", message_name(message_type), sequence, self.target)
        return sequence

    async def request(
        self,
        conn: Connection | None,
        message_type: int,
        payload: BaseStruct | bytes | None,
        expect: Container[int],
        *,
        timeout: float | None = None,
    ) -> Response:
        """Send a Get-style request and return the matching reply."""
        async with asyncio.timeout(timeout), self.connection(conn) as active:
            sequence = await self.send(active, AckResFlag.NONE, message_type, payload)
            return await read_response(
                active,
                source=self._source,
                sequence=sequence,
                message_types=expect,
                read_timeout=self.config.read_timeout,
            )

    async def command(
        self,
        conn: Connection | None,
        message_type: int,
        payload: BaseStruct | bytes | None,
        *,
        ack: bool,
        timeout: float | None = None,
    ) -> None:
        """Send a Set-style request, optionally waiting for its ack."""
        async with self.connection(conn) as active:
            flags = AckResFlag.ACK_REQUIRED if ack else AckResFlag.NONE
            sequence = await self.send(active, flags, message_type, payload)
            if ack:
                await wait_for_acks(
                    active,
                    self._source,
                    (sequence,),
                    timeout=timeout,
                    read_timeout=self.config.read_timeout,
                )

    # --- Products and color sanitization ---

    @property
    def product(self) -> Product | None:
        if self.hardware_version is None:
            return None
        return self.registry.lookup(self.hardware_version.vendor_id, self.hardware_version.product_id)

    def features(self) -> Features | None:
        """Features of this product at the cached firmware version."""
        product = self.product
        if product is None:
            return None
        firmware = self.firmware.version if self.firmware is not None else EMPTY_FIRMWARE
        return product.features_at(firmware)

    def kelvin_range(self) -> tuple[int, int]:
        features = self.features()
        if features is None or not features.has_temperature_range:
            return (KELVIN_MIN, KELVIN_MAX)
        return (features.min_kelvin, features.max_kelvin)

    def sanitize_color(self, color: Color) -> Color:
        """Clamp kelvin into the range this device accepts."""
        low, high = self.kelvin_range()
        return color.clamp_kelvin(low, high)

    # --- Device-level requests ---

    async def get_label(self, conn: Connection | None = None, *, timeout: float | None = None) -> str:
        response = await self.request(
            conn, MessageType.GET_LABEL, None, (MessageType.STATE_LABEL,), timeout=timeout
        )
        self.label = LabelPayload.decode(response.payload).text
        return self.label

    async def set_label(
        self,
        label: str,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        payload = LabelPayload.from_text(label)
        await self.command(conn, MessageType.SET_LABEL, payload, ack=ack, timeout=timeout)
        self.label = payload.text

    async def get_power(self, conn: Connection | None = None, *, timeout: float | None = None) -> PowerPayload:
        response = await self.request(
            conn, MessageType.GET_POWER, None, (MessageType.STATE_POWER,), timeout=timeout
        )
        return PowerPayload.decode(response.payload)

    async def set_power(
        self,
        level: int,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        await self.command(conn, MessageType.SET_POWER, PowerPayload(level=level), ack=ack, timeout=timeout)

    async def get_hardware_version(
        self, conn: Connection | None = None, *, timeout: float | None = None
    ) -> HardwareVersion:
        response = await self.request(
            conn, MessageType.GET_VERSION, None, (MessageType.STATE_VERSION,), timeout=timeout
        )
        self.hardware_version = HardwareVersion.decode(response.payload)
        return self.hardware_version

    async def get_firmware(self, conn: Connection | None = None, *, timeout: float | None = None) -> HostFirmware:
        response = await self.request(
            conn, MessageType.GET_HOST_FIRMWARE, None, (MessageType.STATE_HOST_FIRMWARE,), timeout=timeout
        )
        self.firmware = HostFirmware.decode(response.payload)
        return self.firmware

    async def echo(self, conn: Connection | None = None, *, timeout: float | None = None) -> None:
        """Round-trip 64 random bytes through the device."""
        sent = EchoPayload(data=os.urandom(ECHO_PAYLOAD_LENGTH))
        response = await self.request(
            conn, MessageType.ECHO_REQUEST, sent, (MessageType.ECHO_RESPONSE,), timeout=timeout
        )
        if EchoPayload.decode(response.payload).data != sent.data:
            raise ValueError("unexpected echo response value")


class DeviceCapability:
    """Shared forwarding for capability wrappers around a :class:`Device`."""

    def __init__(self, device: Device) -> None:
        self.device = device

    def __str__(self) -> str:
        if self.device.label:
            return f"{self.device.label}({self.device.target})"
        return f"{type(self).__name__}({self.device.target})"

    @property
    def target(self) -> Target:
        return self.device.target

    @property
    def source(self) -> int:
        return self.device.source

    @property
    def label(self) -> str | None:
        return self.device.label

    @property
    def hardware_version(self) -> HardwareVersion | None:
        return self.device.hardware_version

    @property
    def firmware(self) -> HostFirmware | None:
        return self.device.firmware

    def next_sequence(self) -> int:
        return self.device.next_sequence()

    def sanitize_color(self, color: Color) -> Color:
        return self.device.sanitize_color(color)

    async def dial(self) -> DatagramConnection:
        return await self.device.dial()

    def connection(self, conn: Connection | None = None) -> AbstractAsyncContextManager[Connection]:
        return self.device.connection(conn)
