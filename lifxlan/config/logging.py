"""Logging setup for lifxlan command line tools.

The library only creates ``lifxlan.*`` loggers. Handlers are installed by
:func:`configure_logging`, which the CLI calls once at startup.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from logging.config import dictConfig
from typing import Any

import msgspec

from ..protocol.target import Target
from .model import ClientConfig

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _render_extra(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        # Datagrams are binary; never decode them as text.
        return f"[{bytes(value).hex(' ').upper()}]"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Target):
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record, logger names relative to ``lifxlan.``."""

    PREFIX = "lifxlan."

    def format(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(self.PREFIX)
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": name,
            "message": record.getMessage(),
        }

        extra = {
            key: _render_extra(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return msgspec.json.encode(entry).decode("utf-8")


def configure_logging(config: ClientConfig) -> None:
    """Route every log record to stderr in ``config.log_format``."""
    level = "DEBUG" if config.debug_logging else "INFO"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": "lifxlan.config.logging.StructuredLogFormatter"},
                "text": {"format": TEXT_FORMAT},
            },
            "handlers": {
                "lifxlan": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stderr,
                    "level": level,
                    "formatter": config.log_format,
                }
            },
            "root": {"level": level, "handlers": ["lifxlan"]},
        }
    )

    logging.getLogger("lifxlan").debug("Logging configured: level=%s format=%s", level, config.log_format)
