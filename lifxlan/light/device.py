"""Light capability: color, power and waveform control."""

from __future__ import annotations

import logging

import msgspec

from ..device import Device, DeviceCapability
from ..protocol.protocol import MessageType
from ..protocol.structures import Color, convert_duration
from ..transport.udp import Connection
from .messages import (
    LightStatePayload,
    SetColorPayload,
    SetLightPowerPayload,
    SetWaveformOptionalPayload,
    Waveform,
    convert_skew_ratio,
)

logger = logging.getLogger("lifxlan.light")


class WaveformArgs(msgspec.Struct, frozen=True, kw_only=True):
    """Arguments of :meth:`LightDevice.set_waveform`.

    ``period`` is in seconds. ``skew_ratio`` is the share of each cycle spent
    on the original color (0.5 is symmetric). The ``keep_*`` flags leave the
    matching HSBK component untouched.
    """

    color: Color
    transient: bool = False
    period: float = 1.0
    cycles: float = 1.0
    waveform: Waveform = Waveform.SINE
    skew_ratio: float = 0.5
    keep_hue: bool = False
    keep_saturation: bool = False
    keep_brightness: bool = False
    keep_kelvin: bool = False


class LightDevice(DeviceCapability):
    """A device that answered the light Get probe."""

    async def get_color(self, conn: Connection | None = None, *, timeout: float | None = None) -> LightStatePayload:
        response = await self.device.request(
            conn, MessageType.LIGHT_GET, None, (MessageType.LIGHT_STATE,), timeout=timeout
        )
        state = LightStatePayload.decode(response.payload)
        self.device.label = state.label_text
        return state

    async def set_color(
        self,
        color: Color,
        transition: float = 0.0,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        payload = SetColorPayload(color=self.sanitize_color(color), duration=convert_duration(transition))
        await self.device.command(conn, MessageType.LIGHT_SET_COLOR, payload, ack=ack, timeout=timeout)

    async def set_light_power(
        self,
        level: int,
        transition: float = 0.0,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        payload = SetLightPowerPayload(level=level, duration=convert_duration(transition))
        await self.device.command(conn, MessageType.LIGHT_SET_POWER, payload, ack=ack, timeout=timeout)

    async def set_waveform(
        self,
        args: WaveformArgs,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        payload = SetWaveformOptionalPayload(
            transient=args.transient,
            color=self.sanitize_color(args.color),
            period=convert_duration(args.period),
            cycles=args.cycles,
            skew_ratio=convert_skew_ratio(1.0 - args.skew_ratio),
            waveform=int(args.waveform),
            set_hue=not args.keep_hue,
            set_saturation=not args.keep_saturation,
            set_brightness=not args.keep_brightness,
            set_kelvin=not args.keep_kelvin,
        )
        await self.device.command(conn, MessageType.LIGHT_SET_WAVEFORM_OPTIONAL, payload, ack=ack, timeout=timeout)


async def wrap(
    device: Device | DeviceCapability,
    *,
    force: bool = False,
    conn: Connection | None = None,
    timeout: float | None = None,
) -> LightDevice:
    """Probe *device* with a light Get and wrap it as a :class:`LightDevice`.

    Already wrapped devices are returned as is unless *force* is set. A
    device that is not a light raises :class:`UnhandledMessageError`, or
    keeps waiting until *timeout* if it stays silent. On success the label is
    cached.
    """
    if not force:
        if isinstance(device, LightDevice):
            return device
        light = getattr(device, "light", None)
        if isinstance(light, LightDevice):
            return light

    base = device.device
    response = await base.request(conn, MessageType.LIGHT_GET, None, (MessageType.LIGHT_STATE,), timeout=timeout)
    state = LightStatePayload.decode(response.payload)
    base.label = state.label_text
    logger.debug("Wrapped %s as a light", base)
    return LightDevice(base)
