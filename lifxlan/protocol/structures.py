"""LIFX LAN payload structures.

Each payload pairs a msgspec record (the typed view) with a construct
schema (the byte-exact little-endian layout, reserved bytes included).
"""

from __future__ import annotations

from typing import Any, ClassVar, Type, TypeVar

import msgspec
from construct import (  # type: ignore
    Bytes,
    Construct,
    ConstructError,
    Int8ul,
    Int16ul,
    Int32ul,
    Int64ul,
    Padding,
    Struct as BinStruct,
)

from .protocol import ECHO_PAYLOAD_LENGTH, LABEL_LENGTH, POWER_OFF, UINT16_MAX, UINT32_MAX

T = TypeVar("T", bound="BaseStruct")


def _plain(value: Any) -> Any:
    """Strip construct containers down to builtin dicts and lists."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if not k.startswith("_")}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class BaseStruct(msgspec.Struct, frozen=True):
    """Base class for hybrid Msgspec/Construct structures."""

    # Subclasses must define this schema
    _SCHEMA: ClassVar[Construct]

    @classmethod
    def decode(cls: Type[T], data: bytes | bytearray | memoryview) -> T:
        """Decode binary data into a typed Msgspec struct."""
        if not data:
            raise ValueError(f"{cls.__name__}: empty payload")

        try:
            container: Any = cls._SCHEMA.parse(bytes(data))
        except ConstructError as exc:
            raise ValueError(f"{cls.__name__}: malformed payload: {exc}") from exc

        return msgspec.convert(_plain(container), cls)

    def encode(self) -> bytes:
        """Encode the typed Msgspec struct into binary data."""
        try:
            return self._SCHEMA.build(msgspec.to_builtins(self, builtin_types=(bytes, bytearray)))
        except ConstructError as exc:
            raise ValueError(f"{type(self).__name__}: cannot encode: {exc}") from exc


# --- Color ---

COLOR_STRUCT = BinStruct(
    "hue" / Int16ul,
    "saturation" / Int16ul,
    "brightness" / Int16ul,
    "kelvin" / Int16ul,
)

_HUE_RATE = float(1 << 16) / 360
_SB_RATE = float(UINT16_MAX)
_RGB_BASE = 0xFFFF


class Color(BaseStruct, frozen=True):
    """HSBK color as it travels on the wire, every field 16 bits."""

    hue: int = 0
    saturation: int = 0
    brightness: int = 0
    kelvin: int = 0

    _SCHEMA = COLOR_STRUCT

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int, kelvin: int = 0) -> Color:
        """Convert 8-bit RGB into HSBK with 16-bit saturation and brightness."""
        for name, channel in (("red", red), ("green", green), ("blue", blue)):
            if not 0 <= channel <= 0xFF:
                raise ValueError(f"{name} {channel} outside range 0..255")

        # Widen to 16 bits per channel, like 0xAB -> 0xABAB.
        r, g, b = red * 0x101, green * 0x101, blue * 0x101
        cmax = max(r, g, b)
        delta = cmax - min(r, g, b)

        if delta == 0:
            hue = 0
        elif cmax == r:
            hue = round((g - b) / delta * 60)
        elif cmax == g:
            hue = round(((b - r) / delta + 2) * 60)
        else:
            hue = round(((r - g) / delta + 4) * 60)
        hue %= 360

        saturation = 0 if cmax == 0 else round(delta / cmax * _SB_RATE)
        return cls(
            hue=round(hue * _HUE_RATE) & UINT16_MAX,
            saturation=saturation,
            brightness=round(cmax / _RGB_BASE * _SB_RATE),
            kelvin=kelvin,
        )

    def clamp_kelvin(self, low: int, high: int) -> Color:
        """Return this color with kelvin clamped into ``[low, high]``."""
        kelvin = min(max(self.kelvin, low), high)
        if kelvin == self.kelvin:
            return self
        return msgspec.structs.replace(self, kelvin=kelvin)


COLOR_BLACK = Color()


def convert_duration(seconds: float) -> int:
    """Convert a transition duration to the wire's u32 milliseconds."""
    if seconds < 0:
        raise ValueError(f"Duration must not be negative, got {seconds}")
    return min(int(seconds * 1000), UINT32_MAX)


def transition_seconds(milliseconds: int) -> float:
    return milliseconds / 1000.0


# --- Device payloads ---


class StateServicePayload(BaseStruct, frozen=True):
    service: int
    port: int

    _SCHEMA = BinStruct("service" / Int8ul, "port" / Int32ul)


class StateUnhandledPayload(BaseStruct, frozen=True):
    unhandled_type: int

    _SCHEMA = BinStruct("unhandled_type" / Int16ul)


class LabelPayload(BaseStruct, frozen=True):
    """SetLabel / StateLabel: 32 bytes of UTF-8, NUL padded."""

    label: bytes

    _SCHEMA = BinStruct("label" / Bytes(LABEL_LENGTH))

    @classmethod
    def from_text(cls, text: str) -> LabelPayload:
        return cls(label=encode_label(text))

    @property
    def text(self) -> str:
        return decode_label(self.label)


def encode_label(text: str) -> bytes:
    """Encode *text* NUL padded; labels longer than 32 bytes are truncated."""
    raw = text.encode("utf-8")[:LABEL_LENGTH]
    # Drop a multi-byte character split by the cut.
    raw = raw.decode("utf-8", errors="ignore").encode("utf-8")
    return raw.ljust(LABEL_LENGTH, b"\x00")


def decode_label(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


class PowerPayload(BaseStruct, frozen=True):
    """SetPower / StatePower level: 0 is off, anything else is on."""

    level: int

    _SCHEMA = BinStruct("level" / Int16ul)

    @property
    def is_on(self) -> bool:
        return self.level != POWER_OFF


HARDWARE_VERSION_STRUCT = BinStruct(
    "vendor_id" / Int32ul,
    "product_id" / Int32ul,
    "hardware_version" / Int32ul,
)


class HardwareVersion(BaseStruct, frozen=True):
    """StateVersion payload."""

    vendor_id: int
    product_id: int
    hardware_version: int = 0

    _SCHEMA = HARDWARE_VERSION_STRUCT

    def __str__(self) -> str:
        return f"({self.vendor_id}, {self.product_id}, {self.hardware_version})"


FIRMWARE_STRUCT = BinStruct(
    "build" / Int64ul,
    Padding(8),
    "minor" / Int16ul,
    "major" / Int16ul,
)


class HostFirmware(BaseStruct, frozen=True):
    """StateHostFirmware payload."""

    build: int = 0
    minor: int = 0
    major: int = 0

    _SCHEMA = FIRMWARE_STRUCT

    @property
    def version(self) -> tuple[int, int]:
        return (self.major, self.minor)

    def __str__(self) -> str:
        return f"({self.major}, {self.minor})"


class EchoPayload(BaseStruct, frozen=True):
    data: bytes

    _SCHEMA = BinStruct("data" / Bytes(ECHO_PAYLOAD_LENGTH))
