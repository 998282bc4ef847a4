"""Tile message payloads."""

from __future__ import annotations

from typing import Final

import msgspec
from construct import Array, Float32l, Int8ul, Int16sl, Int32ul, Padding  # type: ignore
from construct import Struct as BinStruct  # type: ignore

from ..protocol.structures import (
    COLOR_STRUCT,
    FIRMWARE_STRUCT,
    HARDWARE_VERSION_STRUCT,
    BaseStruct,
    Color,
    HardwareVersion,
    HostFirmware,
)

TILE_COLOR_COUNT: Final[int] = 64
MAX_CHAIN_LENGTH: Final[int] = 16

TILE_DEVICE_STRUCT = BinStruct(
    "accel_x" / Int16sl,
    "accel_y" / Int16sl,
    "accel_z" / Int16sl,
    Padding(2),
    "user_x" / Float32l,
    "user_y" / Float32l,
    "width" / Int8ul,
    "height" / Int8ul,
    Padding(1),
    "hardware_version" / HARDWARE_VERSION_STRUCT,
    "firmware" / FIRMWARE_STRUCT,
    Padding(4),
)


class TileDeviceRecord(BaseStruct, frozen=True, kw_only=True):
    """One tile of a StateDeviceChain reply (55 bytes on the wire)."""

    accel_x: int = -1
    accel_y: int = -1
    accel_z: int = -1
    user_x: float = 0.0
    user_y: float = 0.0
    width: int = 0
    height: int = 0
    hardware_version: HardwareVersion = msgspec.field(default_factory=lambda: HardwareVersion(vendor_id=0, product_id=0))
    firmware: HostFirmware = msgspec.field(default_factory=HostFirmware)

    _SCHEMA = TILE_DEVICE_STRUCT


class StateDeviceChainPayload(BaseStruct, frozen=True):
    """StateDeviceChain (702): sixteen slots, ``total_count`` of them valid."""

    start_index: int
    tile_devices: tuple[TileDeviceRecord, ...]
    total_count: int

    _SCHEMA = BinStruct(
        "start_index" / Int8ul,
        "tile_devices" / Array(MAX_CHAIN_LENGTH, TILE_DEVICE_STRUCT),
        "total_count" / Int8ul,
    )

    @classmethod
    def from_records(cls, records: list[TileDeviceRecord], start_index: int = 0) -> StateDeviceChainPayload:
        """Place *records* from *start_index* and pad the remaining slots."""
        if start_index + len(records) > MAX_CHAIN_LENGTH:
            raise ValueError(f"A chain holds at most {MAX_CHAIN_LENGTH} tiles")
        slots = [TileDeviceRecord()] * MAX_CHAIN_LENGTH
        slots[start_index : start_index + len(records)] = records
        return cls(start_index=start_index, tile_devices=tuple(slots), total_count=len(records))

    def tiles(self) -> tuple[TileDeviceRecord, ...]:
        """The valid records, in chain order."""
        end = self.start_index + self.total_count
        if end > MAX_CHAIN_LENGTH:
            raise ValueError(
                f"Chain of {self.total_count} tiles from index {self.start_index} "
                f"does not fit {MAX_CHAIN_LENGTH} slots"
            )
        return self.tile_devices[self.start_index : end]


class GetTileState64Payload(BaseStruct, frozen=True, kw_only=True):
    tile_index: int
    length: int
    x: int = 0
    y: int = 0
    width: int

    _SCHEMA = BinStruct(
        "tile_index" / Int8ul,
        "length" / Int8ul,
        Padding(1),
        "x" / Int8ul,
        "y" / Int8ul,
        "width" / Int8ul,
    )


class SetTileState64Payload(BaseStruct, frozen=True, kw_only=True):
    tile_index: int
    length: int = 1
    x: int = 0
    y: int = 0
    width: int
    duration: int = 0
    colors: tuple[Color, ...]

    _SCHEMA = BinStruct(
        "tile_index" / Int8ul,
        "length" / Int8ul,
        Padding(1),
        "x" / Int8ul,
        "y" / Int8ul,
        "width" / Int8ul,
        "duration" / Int32ul,
        "colors" / Array(TILE_COLOR_COUNT, COLOR_STRUCT),
    )


class StateTileState64Payload(BaseStruct, frozen=True, kw_only=True):
    tile_index: int
    x: int = 0
    y: int = 0
    width: int
    colors: tuple[Color, ...]

    _SCHEMA = BinStruct(
        "tile_index" / Int8ul,
        Padding(1),
        "x" / Int8ul,
        "y" / Int8ul,
        "width" / Int8ul,
        "colors" / Array(TILE_COLOR_COUNT, COLOR_STRUCT),
    )
