"""Relay capability for LIFX switches."""

from __future__ import annotations

import logging

from ..device import Device, DeviceCapability
from ..protocol.protocol import MessageType
from ..transport.udp import Connection
from .messages import GetRPowerPayload, RPowerPayload

logger = logging.getLogger("lifxlan.relay")


class RelayDevice(DeviceCapability):
    """A device that answered GetRPower."""

    async def get_rpower(
        self,
        index: int,
        conn: Connection | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        """Return the power level of relay *index*."""
        response = await self.device.request(
            conn,
            MessageType.GET_RPOWER,
            GetRPowerPayload(index=index),
            (MessageType.STATE_RPOWER,),
            timeout=timeout,
        )
        return RPowerPayload.decode(response.payload).level

    async def set_rpower(
        self,
        index: int,
        level: int,
        conn: Connection | None = None,
        *,
        ack: bool = False,
        timeout: float | None = None,
    ) -> None:
        await self.device.command(
            conn,
            MessageType.SET_RPOWER,
            RPowerPayload(index=index, level=level),
            ack=ack,
            timeout=timeout,
        )


async def wrap(
    device: Device | DeviceCapability,
    *,
    force: bool = False,
    conn: Connection | None = None,
    timeout: float | None = None,
) -> RelayDevice:
    """Probe relay 0 and wrap *device* as a :class:`RelayDevice`.

    StateUnhandled raises :class:`UnhandledMessageError`.
    """
    if not force and isinstance(device, RelayDevice):
        return device

    base = device.device
    response = await base.request(
        conn,
        MessageType.GET_RPOWER,
        GetRPowerPayload(index=0),
        (MessageType.STATE_RPOWER,),
        timeout=timeout,
    )
    RPowerPayload.decode(response.payload)
    logger.debug("Wrapped %s as a relay device", base)
    return RelayDevice(base)
