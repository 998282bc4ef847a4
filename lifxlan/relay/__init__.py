"""Relay capability for LIFX switches."""

from .device import RelayDevice, wrap
from .messages import GetRPowerPayload, RPowerPayload

__all__ = ["GetRPowerPayload", "RPowerPayload", "RelayDevice", "wrap"]
