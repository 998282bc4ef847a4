"""Protocol helpers for the LIFX LAN client."""

from . import frame, products, protocol, structures, target
from .frame import (
    Header,
    MalformedMessageError,
    MessageSizeMismatchError,
    MessageTooShortError,
    Response,
    build_message,
    decode_header,
    encode_header,
    parse_message,
)
from .protocol import HEADER_LENGTH, AckResFlag, MessageType, ServiceType
from .target import ALL_DEVICES, Target

__all__ = [
    "ALL_DEVICES",
    "AckResFlag",
    "HEADER_LENGTH",
    "Header",
    "MalformedMessageError",
    "MessageSizeMismatchError",
    "MessageTooShortError",
    "MessageType",
    "Response",
    "ServiceType",
    "Target",
    "build_message",
    "decode_header",
    "encode_header",
    "frame",
    "parse_message",
    "products",
    "protocol",
    "structures",
    "target",
]
