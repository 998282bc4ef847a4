"""Default values shared by the LIFX LAN client."""

from __future__ import annotations

from typing import Final

DEFAULT_PORT: Final[int] = 56700
DEFAULT_BROADCAST_HOST: Final[str] = "255.255.255.255"

# Per-read deadline. A read hitting it is not an error, only a chance to
# observe cancellation and the caller's overall timeout.
DEFAULT_READ_TIMEOUT: Final[float] = 0.1
DEFAULT_READ_BUFFER_SIZE: Final[int] = 4096

DEFAULT_DISCOVERY_TIMEOUT: Final[float] = 2.0
DEFAULT_BROADCAST_ATTEMPTS: Final[int] = 3
DEFAULT_BROADCAST_RETRY_INTERVAL: Final[float] = 0.2
DEFAULT_DEBUG_LOGGING: Final[bool] = False
DEFAULT_LOG_FORMAT: Final[str] = "json"
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

KELVIN_WARM: Final[int] = 2500
KELVIN_COOL: Final[int] = 9000
KELVIN_MIN: Final[int] = KELVIN_WARM
KELVIN_MAX: Final[int] = KELVIN_COOL

ENV_PREFIX: Final[str] = "LIFXLAN_"
