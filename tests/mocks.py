"""Shared mocks for lifxlan tests."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any

from lifxlan.light.messages import LightStatePayload, SetColorPayload
from lifxlan.protocol.frame import MalformedMessageError, Response, build_message, parse_message
from lifxlan.protocol.protocol import AckResFlag, MessageType, ServiceType
from lifxlan.protocol.structures import (
    COLOR_BLACK,
    Color,
    EchoPayload,
    HardwareVersion,
    HostFirmware,
    LabelPayload,
    PowerPayload,
    StateServicePayload,
    StateUnhandledPayload,
    encode_label,
)
from lifxlan.protocol.target import Target
from lifxlan.relay.messages import GetRPowerPayload, RPowerPayload
from lifxlan.tile.messages import (
    TILE_COLOR_COUNT,
    GetTileState64Payload,
    SetTileState64Payload,
    StateDeviceChainPayload,
    StateTileState64Payload,
    TileDeviceRecord,
)
from lifxlan.transport.udp import Address

MOCK_TARGET = Target(1)


def make_message(
    message_type: int,
    *,
    source: int,
    sequence: int,
    payload: bytes = b"",
    flags: AckResFlag | int = AckResFlag.NONE,
    target: Target = MOCK_TARGET,
) -> bytes:
    return build_message(
        tagged=False,
        source=source,
        target=target,
        flags=flags,
        sequence=sequence,
        message_type=message_type,
        payload=payload,
    )


def make_ack(source: int, sequence: int) -> bytes:
    return make_message(MessageType.ACKNOWLEDGEMENT, source=source, sequence=sequence)


class FakeConnection:
    """Scripted connection: reads pop from ``reads``, then block forever."""

    def __init__(self, reads: Iterable[bytes | BaseException] = (), *, short_by: int = 0) -> None:
        self.reads: deque[bytes | BaseException] = deque(reads)
        self.writes: list[bytes] = []
        self.short_by = short_by
        self.closed = False

    async def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        return len(data) - self.short_by

    async def read(self) -> bytes:
        if not self.reads:
            await asyncio.Event().wait()
        item = self.reads.popleft()
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def tile_record(user_x: float = 0.0, user_y: float = 0.0, width: int = 8, height: int = 8) -> TileDeviceRecord:
    return TileDeviceRecord(
        user_x=user_x,
        user_y=user_y,
        width=width,
        height=height,
        hardware_version=HardwareVersion(vendor_id=1, product_id=55, hardware_version=1),
        firmware=HostFirmware(build=1, minor=70, major=3),
    )


class MockService(asyncio.DatagramProtocol):
    """A loopback LIFX device answering the requests the client issues."""

    def __init__(
        self,
        *,
        target: Target = MOCK_TARGET,
        label: str = "mock",
        hardware_version: HardwareVersion | None = None,
        firmware: HostFirmware | None = None,
        tiles: Iterable[TileDeviceRecord] = (),
        start_index: int = 0,
        unhandled: Iterable[int] = (),
    ) -> None:
        self.target = target
        self.label = label
        self.hardware_version = hardware_version or HardwareVersion(vendor_id=1, product_id=55)
        self.firmware = firmware or HostFirmware(build=1, minor=70, major=3)
        self.tiles = list(tiles)
        self.start_index = start_index
        self.unhandled = set(unhandled)

        self.color = COLOR_BLACK
        self.power = 0
        self.rpower: dict[int, int] = {0: 0}
        self.tile_colors: dict[int, tuple[Color, ...]] = {}

        self.acks_to_drop = 0
        self.tile_replies_to_drop = 0
        self.received: list[Response] = []
        self.transport: asyncio.DatagramTransport | None = None

        self._handlers: dict[int, Callable[[Response], tuple[int, bytes] | list[tuple[int, bytes]] | None]] = {
            MessageType.GET_SERVICE: self._get_service,
            MessageType.GET_LABEL: lambda _: (MessageType.STATE_LABEL, LabelPayload.from_text(self.label).encode()),
            MessageType.SET_LABEL: self._set_label,
            MessageType.GET_POWER: lambda _: (MessageType.STATE_POWER, PowerPayload(level=self.power).encode()),
            MessageType.SET_POWER: self._set_power,
            MessageType.GET_VERSION: lambda _: (MessageType.STATE_VERSION, self.hardware_version.encode()),
            MessageType.GET_HOST_FIRMWARE: lambda _: (MessageType.STATE_HOST_FIRMWARE, self.firmware.encode()),
            MessageType.ECHO_REQUEST: lambda message: (
                MessageType.ECHO_RESPONSE,
                EchoPayload.decode(message.payload).encode(),
            ),
            MessageType.LIGHT_GET: self._light_state,
            MessageType.LIGHT_SET_COLOR: self._set_color,
            MessageType.GET_DEVICE_CHAIN: self._device_chain,
            MessageType.GET_TILE_STATE_64: self._get_tile_state,
            MessageType.SET_TILE_STATE_64: self._set_tile_state,
            MessageType.GET_RPOWER: self._get_rpower,
            MessageType.SET_RPOWER: self._set_rpower,
        }

    async def start(self) -> Address:
        loop = asyncio.get_running_loop()
        await loop.create_datagram_endpoint(lambda: self, local_addr=("127.0.0.1", 0))
        return self.address

    @property
    def address(self) -> Address:
        assert self.transport is not None
        host, port = self.transport.get_extra_info("sockname")[:2]
        return host, port

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()

    def received_of(self, message_type: int) -> list[Response]:
        return [message for message in self.received if message.message_type == message_type]

    # --- asyncio.DatagramProtocol ---

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: Address) -> None:
        try:
            message = parse_message(data)
        except MalformedMessageError:
            return
        self.received.append(message)

        if message.flags & AckResFlag.ACK_REQUIRED:
            if self.acks_to_drop > 0:
                self.acks_to_drop -= 1
            else:
                self._reply(message, addr, MessageType.ACKNOWLEDGEMENT, b"")

        if message.message_type in self.unhandled:
            payload = StateUnhandledPayload(unhandled_type=message.message_type).encode()
            self._reply(message, addr, MessageType.STATE_UNHANDLED, payload)
            return

        handler = self._handlers.get(message.message_type)
        if handler is None:
            return
        replies = handler(message)
        if replies is None:
            return
        if isinstance(replies, tuple):
            replies = [replies]
        for message_type, payload in replies:
            self._reply(message, addr, message_type, payload)

    def _reply(self, request: Response, addr: Address, message_type: int, payload: bytes) -> None:
        assert self.transport is not None
        self.transport.sendto(
            make_message(
                message_type,
                source=request.source,
                sequence=request.sequence,
                payload=payload,
                flags=request.flags,
                target=self.target,
            ),
            addr,
        )

    # --- Handlers ---

    def _get_service(self, _: Response) -> tuple[int, bytes]:
        return MessageType.STATE_SERVICE, StateServicePayload(service=ServiceType.UDP, port=self.address[1]).encode()

    def _set_label(self, message: Response) -> None:
        self.label = LabelPayload.decode(message.payload).text

    def _set_power(self, message: Response) -> None:
        self.power = PowerPayload.decode(message.payload).level

    def _light_state(self, _: Response) -> tuple[int, bytes]:
        state = LightStatePayload(color=self.color, power=self.power, label=encode_label(self.label))
        return MessageType.LIGHT_STATE, state.encode()

    def _set_color(self, message: Response) -> None:
        self.color = SetColorPayload.decode(message.payload).color

    def _device_chain(self, _: Response) -> tuple[int, bytes]:
        chain = StateDeviceChainPayload.from_records(self.tiles, self.start_index)
        return MessageType.STATE_DEVICE_CHAIN, chain.encode()

    def _get_tile_state(self, message: Response) -> list[tuple[int, bytes]]:
        request = GetTileState64Payload.decode(message.payload)
        replies: list[tuple[int, bytes]] = []
        end = min(request.tile_index + request.length, self.start_index + len(self.tiles))
        for tile_index in range(request.tile_index, end):
            if self.tile_replies_to_drop > 0:
                self.tile_replies_to_drop -= 1
                continue
            colors = self.tile_colors.get(tile_index, (COLOR_BLACK,) * TILE_COLOR_COUNT)
            state = StateTileState64Payload(tile_index=tile_index, width=request.width, colors=colors)
            replies.append((MessageType.STATE_TILE_STATE_64, state.encode()))
        return replies

    def _set_tile_state(self, message: Response) -> None:
        request = SetTileState64Payload.decode(message.payload)
        self.tile_colors[request.tile_index] = request.colors

    def _get_rpower(self, message: Response) -> tuple[int, bytes]:
        index = GetRPowerPayload.decode(message.payload).index
        return MessageType.STATE_RPOWER, RPowerPayload(index=index, level=self.rpower.get(index, 0)).encode()

    def _set_rpower(self, message: Response) -> None:
        request = RPowerPayload.decode(message.payload)
        self.rpower[request.index] = request.level


@asynccontextmanager
async def running_service(**kwargs: Any) -> AsyncIterator[MockService]:
    service = MockService(**kwargs)
    await service.start()
    try:
        yield service
    finally:
        service.close()
