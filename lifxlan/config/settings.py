"""Settings loader for the LIFX LAN client.

Configuration comes from ``LIFXLAN_*`` environment variables (or any mapping
with the same shape), validated through :class:`ClientConfigSchema`. Unset
keys fall back to the defaults in :mod:`lifxlan.const`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any

from marshmallow import ValidationError

from ..const import ENV_PREFIX
from .model import ClientConfig
from .schema import ClientConfigSchema

logger = logging.getLogger(__name__)


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a plain dictionary."""
    return asdict(ClientConfig())


def _raw_from_environ(environ: Mapping[str, str]) -> dict[str, str]:
    fields = ClientConfigSchema().fields
    raw: dict[str, str] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX) :].lower()
        if name in fields:
            raw[name] = value
    return raw


def load_client_config(environ: Mapping[str, str] | None = None) -> ClientConfig:
    """Load and validate configuration from the environment.

    Raises ValueError with the marshmallow messages attached when a value is
    rejected.
    """
    if environ is None:
        environ = os.environ
    raw = _raw_from_environ(environ)
    try:
        config: ClientConfig = ClientConfigSchema().load(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc.messages}") from exc
    logger.debug("Loaded configuration keys: %s", sorted(raw))
    return config
