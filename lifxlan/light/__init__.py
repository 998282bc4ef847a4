"""Light capability for LIFX devices."""

from .device import LightDevice, WaveformArgs, wrap
from .messages import LightStatePayload, Waveform

__all__ = ["LightDevice", "LightStatePayload", "Waveform", "WaveformArgs", "wrap"]
