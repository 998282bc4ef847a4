"""Configuration helpers for the LIFX LAN client."""

from . import logging, settings  # noqa: F401  # pyright: ignore[reportUnusedImport]
from .model import ClientConfig
from .settings import get_default_config, load_client_config

__all__ = ["ClientConfig", "get_default_config", "load_client_config"]
