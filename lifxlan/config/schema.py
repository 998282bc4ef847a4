"""Marshmallow schema for ClientConfig validation."""

from __future__ import annotations

from typing import Any, Dict

from marshmallow import Schema, ValidationError, fields, post_load, pre_load, validate, validates_schema

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
from ..util import parse_bool
from .model import ClientConfig


class ClientConfigSchema(Schema):
    """Declarative validation schema for LIFX LAN client configuration."""

    # Network
    broadcast_host = fields.Str(load_default=DEFAULT_BROADCAST_HOST, validate=validate.Length(min=1))
    port = fields.Int(load_default=DEFAULT_PORT, validate=validate.Range(min=1, max=65535))

    # Reads
    read_timeout = fields.Float(load_default=DEFAULT_READ_TIMEOUT, validate=validate.Range(min=0.001, max=5.0))
    read_buffer_size = fields.Int(load_default=DEFAULT_READ_BUFFER_SIZE, validate=validate.Range(min=36, max=65535))

    # Discovery
    discovery_timeout = fields.Float(load_default=DEFAULT_DISCOVERY_TIMEOUT, validate=validate.Range(min=0.01))
    broadcast_attempts = fields.Int(load_default=DEFAULT_BROADCAST_ATTEMPTS, validate=validate.Range(min=1, max=10))
    broadcast_retry_interval = fields.Float(
        load_default=DEFAULT_BROADCAST_RETRY_INTERVAL, validate=validate.Range(min=0.0)
    )

    # Logging
    debug_logging = fields.Bool(load_default=DEFAULT_DEBUG_LOGGING)
    log_format = fields.Str(load_default=DEFAULT_LOG_FORMAT, validate=validate.OneOf(LOG_FORMATS))

    @pre_load
    def normalise_raw(self, data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        normalised: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            normalised[key] = value
        if "log_format" in normalised:
            normalised["log_format"] = str(normalised["log_format"]).lower()
        if "debug_logging" in normalised:
            normalised["debug_logging"] = parse_bool(normalised["debug_logging"])
        return normalised

    @validates_schema
    def validate_timeouts(self, data: Dict[str, Any], **kwargs: Any) -> None:
        read_timeout = data.get("read_timeout", DEFAULT_READ_TIMEOUT)
        discovery_timeout = data.get("discovery_timeout", DEFAULT_DISCOVERY_TIMEOUT)
        if read_timeout > discovery_timeout:
            raise ValidationError(
                "read_timeout must not exceed discovery_timeout",
                field_name="read_timeout",
            )

    @post_load
    def make_config(self, data: Dict[str, Any], **kwargs: Any) -> ClientConfig:
        return ClientConfig(**data)
