"""Tile capability: a chain of matrix tiles addressed as one board."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ..device import Device, DeviceCapability
from ..light import LightDevice
from ..light import wrap as wrap_light
from ..protocol.protocol import AckResFlag, MessageType
from ..protocol.structures import StateUnhandledPayload, convert_duration
from ..services.flow import UnhandledMessageError, read_next_response, wait_for_acks
from ..transport.udp import Connection
from .board import BoardData, parse_board
from .color import ColorBoard, collect_tile_colors, paint_tiles
from .messages import (
    GetTileState64Payload,
    SetTileState64Payload,
    StateDeviceChainPayload,
    StateTileState64Payload,
)
from .tile import Tile

logger = logging.getLogger("lifxlan.tile")


class NoTilesError(RuntimeError):
    """GetDeviceChain reported an empty chain."""

    def __init__(self) -> None:
        super().__init__("no tiles found")


class TileDevice(DeviceCapability):
    """A light whose device chain holds one or more tiles."""

    def __init__(self, light: LightDevice, start_index: int, tiles: Sequence[Tile]) -> None:
        super().__init__(light.device)
        self.light = light
        self.start_index = start_index
        self.tiles: tuple[Tile, ...] = tuple(tiles)
        self.board: BoardData = parse_board(self.tiles)

    @property
    def width(self) -> int:
        return self.board.width

    @property
    def height(self) -> int:
        return self.board.height

    def on_tile(self, x: int, y: int) -> bool:
        return self.board.on_tile(x, y)

    def new_color_board(self) -> ColorBoard:
        """An empty color board sized to this chain."""
        return ColorBoard(self.width, self.height)

    async def get_colors(self, conn: Connection | None = None, *, timeout: float | None = None) -> ColorBoard:
        """Read every tile's pixels back onto a board.

        Sends one GetTileState64 covering the whole chain and waits for one
        StateTileState64 per tile. Off-tile cells of the result are ``None``.
        """
        board = self.new_color_board()
        if not self.tiles:
            return board

        payload = GetTileState64Payload(
            tile_index=self.start_index,
            length=len(self.tiles),
            width=self.tiles[0].width,
        )
        async with asyncio.timeout(timeout), self.connection(conn) as active:
            sequence = await self.device.send(active, AckResFlag.NONE, MessageType.GET_TILE_STATE_64, payload)
            pending = set(range(len(self.tiles)))
            while pending:
                response = await read_next_response(active, read_timeout=self.device.config.read_timeout)
                if response.source != self.source or response.sequence != sequence:
                    continue
                if response.message_type == MessageType.STATE_UNHANDLED:
                    raise UnhandledMessageError(StateUnhandledPayload.decode(response.payload).unhandled_type)
                if response.message_type != MessageType.STATE_TILE_STATE_64:
                    continue

                state = StateTileState64Payload.decode(response.payload)
                index = state.tile_index - self.start_index
                if index not in pending:
                    logger.debug("Ignoring duplicate or foreign tile index %d", state.tile_index)
                    continue
                pending.discard(index)
                collect_tile_colors(self.board, index, self.tiles[index].width, state.colors, board)
        return board

    async def set_colors(
        self,
        colors: ColorBoard,
        transition: float = 0.0,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        """Repaint every tile from *colors*.

        Cells without a color, and whole tiles *colors* does not reach, are
        painted black. One SetTileState64 per tile goes out concurrently; with
        *ack* a single wait then covers all of them.
        """
        buffers = paint_tiles(self.board, self.tiles, colors, self.sanitize_color)
        duration = convert_duration(transition)
        flags = AckResFlag.ACK_REQUIRED if ack else AckResFlag.NONE

        async with self.connection(conn) as active:
            try:
                async with asyncio.TaskGroup() as group:
                    tasks = [
                        group.create_task(
                            self.device.send(
                                active,
                                flags,
                                MessageType.SET_TILE_STATE_64,
                                SetTileState64Payload(
                                    tile_index=self.start_index + index,
                                    width=tile.width,
                                    duration=duration,
                                    colors=tuple(buffers[index]),
                                ),
                            )
                        )
                        for index, tile in enumerate(self.tiles)
                    ]
            except ExceptionGroup as group_error:
                raise group_error.exceptions[0] from group_error

            if ack:
                await wait_for_acks(
                    active,
                    self.source,
                    [task.result() for task in tasks],
                    timeout=timeout,
                    read_timeout=self.device.config.read_timeout,
                )


async def wrap(
    device: Device | DeviceCapability,
    *,
    force: bool = False,
    conn: Connection | None = None,
    timeout: float | None = None,
) -> TileDevice:
    """Wrap *device* as a light, then read its device chain.

    Raises :class:`NoTilesError` for an empty chain. The start tile's
    hardware version is cached on the device.
    """
    if not force and isinstance(device, TileDevice):
        return device

    base = device.device
    async with asyncio.timeout(timeout), base.connection(conn) as active:
        light = await wrap_light(device, force=force, conn=active)
        response = await base.request(
            active, MessageType.GET_DEVICE_CHAIN, None, (MessageType.STATE_DEVICE_CHAIN,)
        )

    chain = StateDeviceChainPayload.decode(response.payload)
    records = chain.tiles()
    if not records:
        raise NoTilesError()

    base.hardware_version = records[0].hardware_version
    tiles = [Tile.from_record(record) for record in records]
    logger.debug("Wrapped %s as a chain of %d tile(s) from index %d", base, len(tiles), chain.start_index)
    return TileDevice(light, chain.start_index, tiles)
