"""LIFX LAN wire constants and the binary header schema."""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Final

from construct import Int8ul, Int16ul, Int32ul, Int64ul, Padding, Struct as BinStruct  # type: ignore

HEADER_LENGTH: Final[int] = 36

# Protocol number 1024 plus the always-set addressable bit; tagged adds bit 13.
PROTOCOL_NUMBER: Final[int] = 1024
ADDRESSABLE_BIT: Final[int] = 1 << 12
TAGGED_BIT: Final[int] = 1 << 13
NOT_TAGGED: Final[int] = ADDRESSABLE_BIT + PROTOCOL_NUMBER
TAGGED: Final[int] = TAGGED_BIT + NOT_TAGGED

UINT8_MASK: Final[int] = 0xFF
UINT16_MAX: Final[int] = 0xFFFF
UINT32_MAX: Final[int] = 0xFFFFFFFF
UINT64_MAX: Final[int] = 0xFFFFFFFFFFFFFFFF

TARGET_MAC_LENGTH: Final[int] = 6
LABEL_LENGTH: Final[int] = 32
ECHO_PAYLOAD_LENGTH: Final[int] = 64

POWER_OFF: Final[int] = 0
POWER_ON: Final[int] = UINT16_MAX


class AckResFlag(IntFlag):
    """Bits of the header flags byte."""

    NONE = 0
    RES_REQUIRED = 1 << 0
    ACK_REQUIRED = 1 << 1


class ServiceType(IntEnum):
    """Service advertised in StateService replies."""

    UDP = 1

    def __str__(self) -> str:
        return self.name


class MessageType(IntEnum):
    """Message types known to this client.

    Parsed responses keep the raw integer, so unknown values survive a
    round trip.
    """

    # Discovery
    GET_SERVICE = 2
    STATE_SERVICE = 3

    # Device
    GET_HOST_FIRMWARE = 14
    STATE_HOST_FIRMWARE = 15
    GET_POWER = 20
    SET_POWER = 21
    STATE_POWER = 22
    GET_LABEL = 23
    SET_LABEL = 24
    STATE_LABEL = 25
    GET_VERSION = 32
    STATE_VERSION = 33
    ACKNOWLEDGEMENT = 45
    ECHO_REQUEST = 58
    ECHO_RESPONSE = 59
    STATE_UNHANDLED = 223

    # Light
    LIGHT_GET = 101
    LIGHT_SET_COLOR = 102
    LIGHT_STATE = 107
    LIGHT_SET_POWER = 117
    LIGHT_SET_WAVEFORM_OPTIONAL = 119

    # Tile
    GET_DEVICE_CHAIN = 701
    STATE_DEVICE_CHAIN = 702
    GET_TILE_STATE_64 = 707
    STATE_TILE_STATE_64 = 711
    SET_TILE_STATE_64 = 715

    # Relay
    GET_RPOWER = 816
    SET_RPOWER = 817
    STATE_RPOWER = 818


def message_name(message_type: int) -> str:
    """Return a readable name for *message_type*, known or not."""
    try:
        return MessageType(message_type).name
    except ValueError:
        return f"UNKNOWN({message_type})"


# Reserved regions are Padding: zero on build, skipped on parse.
HEADER_STRUCT = BinStruct(
    "size" / Int16ul,
    "tagged" / Int16ul,
    "source" / Int32ul,
    "target" / Int64ul,
    Padding(6),
    "flags" / Int8ul,
    "sequence" / Int8ul,
    Padding(8),
    "message_type" / Int16ul,
    Padding(2),
)
