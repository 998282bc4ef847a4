"""Light message payloads."""

from __future__ import annotations

from enum import IntEnum

from construct import Bytes, Flag, Float32l, Int8ul, Int16sl, Int16ul, Int32ul, Padding  # type: ignore
from construct import Struct as BinStruct  # type: ignore

from ..protocol.protocol import LABEL_LENGTH, POWER_OFF
from ..protocol.structures import COLOR_STRUCT, BaseStruct, Color, decode_label


class Waveform(IntEnum):
    SAW = 0
    SINE = 1
    HALF_SINE = 2
    TRIANGLE = 3
    PULSE = 4


class LightStatePayload(BaseStruct, frozen=True):
    """State (107): color, power and label in one reply."""

    color: Color
    power: int
    label: bytes

    _SCHEMA = BinStruct(
        "color" / COLOR_STRUCT,
        Padding(2),
        "power" / Int16ul,
        "label" / Bytes(LABEL_LENGTH),
        Padding(8),
    )

    @property
    def label_text(self) -> str:
        return decode_label(self.label)

    @property
    def is_on(self) -> bool:
        return self.power != POWER_OFF


class SetColorPayload(BaseStruct, frozen=True):
    color: Color
    duration: int

    _SCHEMA = BinStruct(
        Padding(1),
        "color" / COLOR_STRUCT,
        "duration" / Int32ul,
    )


class SetLightPowerPayload(BaseStruct, frozen=True):
    level: int
    duration: int

    _SCHEMA = BinStruct("level" / Int16ul, "duration" / Int32ul)


class SetWaveformOptionalPayload(BaseStruct, frozen=True):
    transient: bool
    color: Color
    period: int
    cycles: float
    skew_ratio: int
    waveform: int
    set_hue: bool
    set_saturation: bool
    set_brightness: bool
    set_kelvin: bool

    _SCHEMA = BinStruct(
        Padding(1),
        "transient" / Flag,
        "color" / COLOR_STRUCT,
        "period" / Int32ul,
        "cycles" / Float32l,
        "skew_ratio" / Int16sl,
        "waveform" / Int8ul,
        "set_hue" / Flag,
        "set_saturation" / Flag,
        "set_brightness" / Flag,
        "set_kelvin" / Flag,
    )


def convert_skew_ratio(value: float) -> int:
    """Map a 0..1 skew ratio onto the signed 16-bit wire range."""
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Skew ratio {value} outside range 0..1")
    return round(value * 0xFFFF) - 32768
