"""Relay (switch) message payloads."""

from __future__ import annotations

from construct import Int8ul, Int16ul, Struct as BinStruct  # type: ignore

from ..protocol.protocol import POWER_OFF
from ..protocol.structures import BaseStruct


class GetRPowerPayload(BaseStruct, frozen=True):
    index: int

    _SCHEMA = BinStruct("index" / Int8ul)


class RPowerPayload(BaseStruct, frozen=True):
    """SetRPower / StateRPower: relay index and power level."""

    index: int
    level: int

    _SCHEMA = BinStruct("index" / Int8ul, "level" / Int16ul)

    @property
    def is_on(self) -> bool:
        return self.level != POWER_OFF
