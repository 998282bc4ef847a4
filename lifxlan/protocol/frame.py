"""LIFX LAN header codec and message framing.

Every datagram is a fixed 36-byte little-endian header followed by a
message-type specific payload:

    offset  size  field
    0       2     size (header + payload)
    2       2     protocol number, addressable and tagged bits
    4       4     source
    8       8     target
    16      6     reserved
    22      1     flags (bit 0 res_required, bit 1 ack_required)
    23      1     sequence
    24      8     reserved
    32      2     message type
    34      2     reserved

Payloads are opaque here; the structures in :mod:`lifxlan.protocol.structures`
and the capability packages decode them.
"""

from __future__ import annotations

import msgspec
from construct import ConstructError  # type: ignore

from .protocol import (
    HEADER_LENGTH,
    HEADER_STRUCT,
    NOT_TAGGED,
    TAGGED,
    TAGGED_BIT,
    UINT8_MASK,
    UINT16_MAX,
    UINT32_MAX,
    AckResFlag,
    message_name,
)
from .target import Target

__all__ = [
    "HEADER_LENGTH",
    "Header",
    "MalformedMessageError",
    "MessageSizeMismatchError",
    "MessageTooShortError",
    "Response",
    "build_message",
    "decode_header",
    "encode_header",
    "parse_message",
]

MAX_PAYLOAD_SIZE = UINT16_MAX - HEADER_LENGTH


class MalformedMessageError(ValueError):
    """A datagram that cannot be a LIFX message."""


class MessageTooShortError(MalformedMessageError):
    def __init__(self, length: int) -> None:
        super().__init__(f"response size not enough: {length} < {HEADER_LENGTH}")
        self.length = length


class MessageSizeMismatchError(MalformedMessageError):
    def __init__(self, declared: int, actual: int) -> None:
        super().__init__(f"response size mismatch: header says {declared}, got {actual} bytes")
        self.declared = declared
        self.actual = actual


class Header(msgspec.Struct, frozen=True, kw_only=True):
    """Decoded header fields. Reserved regions are not kept."""

    size: int
    tagged: bool
    source: int
    target: Target
    flags: AckResFlag
    sequence: int
    message_type: int


class Response(msgspec.Struct, frozen=True, kw_only=True):
    """An inbound message: header fields plus the raw payload."""

    message_type: int
    flags: AckResFlag
    source: int
    target: Target
    sequence: int
    payload: bytes = b""
    tagged: bool = False

    def __str__(self) -> str:
        return (
            f"{message_name(self.message_type)}(source={self.source:#010x}, "
            f"target={self.target}, sequence={self.sequence}, payload={len(self.payload)}B)"
        )


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} {value} outside range 0..{maximum}")


def encode_header(
    *,
    tagged: bool,
    source: int,
    target: Target,
    flags: AckResFlag | int,
    sequence: int,
    message_type: int,
    payload_length: int,
) -> bytes:
    """Encode a 36-byte header with ``size = 36 + payload_length``."""
    _check_range("Source", source, UINT32_MAX)
    _check_range("Flags", int(flags), UINT8_MASK)
    _check_range("Sequence", sequence, UINT8_MASK)
    _check_range("Message type", message_type, UINT16_MAX)
    _check_range("Payload length", payload_length, MAX_PAYLOAD_SIZE)

    return HEADER_STRUCT.build(
        {
            "size": HEADER_LENGTH + payload_length,
            "tagged": TAGGED if tagged else NOT_TAGGED,
            "source": source,
            "target": target.value,
            "flags": int(flags),
            "sequence": sequence,
            "message_type": message_type,
        }
    )


def decode_header(data: bytes | bytearray | memoryview) -> Header:
    """Decode the first 36 bytes of *data*."""
    raw = bytes(data)
    if len(raw) < HEADER_LENGTH:
        raise MessageTooShortError(len(raw))
    try:
        container = HEADER_STRUCT.parse(raw[:HEADER_LENGTH])
    except ConstructError as exc:
        raise MalformedMessageError(f"Header parsing failed: {exc}") from exc

    return Header(
        size=container.size,
        tagged=bool(container.tagged & TAGGED_BIT),
        source=container.source,
        target=Target(container.target),
        flags=AckResFlag(container.flags),
        sequence=container.sequence,
        message_type=container.message_type,
    )


def build_message(
    *,
    tagged: bool,
    source: int,
    target: Target,
    flags: AckResFlag | int,
    sequence: int,
    message_type: int,
    payload: bytes = b"",
) -> bytes:
    """Build a complete datagram: header followed by *payload* verbatim."""
    header = encode_header(
        tagged=tagged,
        source=source,
        target=target,
        flags=flags,
        sequence=sequence,
        message_type=message_type,
        payload_length=len(payload),
    )
    return header + bytes(payload)


def parse_message(data: bytes | bytearray | memoryview) -> Response:
    """Parse a received datagram.

    The declared size must equal the buffer length exactly; the payload is
    returned uninterpreted.
    """
    raw = bytes(data)
    header = decode_header(raw)
    if header.size != len(raw):
        raise MessageSizeMismatchError(header.size, len(raw))

    return Response(
        message_type=header.message_type,
        flags=header.flags,
        source=header.source,
        target=header.target,
        sequence=header.sequence,
        payload=raw[HEADER_LENGTH:],
        tagged=header.tagged,
    )
