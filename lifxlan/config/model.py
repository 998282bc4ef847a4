"""Typed configuration model for the LIFX LAN client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..const import (
    DEFAULT_BROADCAST_ATTEMPTS,
    DEFAULT_BROADCAST_HOST,
    DEFAULT_BROADCAST_RETRY_INTERVAL,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_DISCOVERY_TIMEOUT,
    DEFAULT_LOG_FORMAT,
    DEFAULT_PORT,
    DEFAULT_READ_BUFFER_SIZE,
    DEFAULT_READ_TIMEOUT,
    LOG_FORMATS,
)
from ..protocol.frame import HEADER_LENGTH

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ClientConfig:
    """Strongly typed configuration for devices, discovery and the CLI."""

    broadcast_host: str = DEFAULT_BROADCAST_HOST
    port: int = DEFAULT_PORT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE
    discovery_timeout: float = DEFAULT_DISCOVERY_TIMEOUT
    broadcast_attempts: int = DEFAULT_BROADCAST_ATTEMPTS
    broadcast_retry_interval: float = DEFAULT_BROADCAST_RETRY_INTERVAL
    debug_logging: bool = DEFAULT_DEBUG_LOGGING
    log_format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self) -> None:
        if not self.broadcast_host:
            raise ValueError("broadcast_host must be configured")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be within 1..65535, got {self.port}")
        self.read_timeout = self._require_positive("read_timeout", float(self.read_timeout))
        self.discovery_timeout = self._require_positive("discovery_timeout", float(self.discovery_timeout))
        self.broadcast_attempts = self._require_positive("broadcast_attempts", int(self.broadcast_attempts))
        self.broadcast_retry_interval = max(0.0, float(self.broadcast_retry_interval))
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}")
        if self.read_buffer_size < HEADER_LENGTH:
            raise ValueError(
                f"read_buffer_size must hold at least one header ({HEADER_LENGTH} bytes), "
                f"got {self.read_buffer_size}"
            )
        if self.read_timeout > self.discovery_timeout:
            logger.warning(
                "read_timeout %.3fs exceeds discovery_timeout %.3fs; discovery will wait a full read window.",
                self.read_timeout,
                self.discovery_timeout,
            )

    @staticmethod
    def _require_positive(name: str, value: int | float) -> int | float:
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")
        return value
