"""Small helpers shared across the LIFX LAN client."""

from __future__ import annotations

import logging

__all__ = [
    "log_hexdump",
    "parse_bool",
]

# Tile frames run past 500 bytes; longer dumps are cut.
HEXDUMP_LIMIT = 128


def log_hexdump(
    logger_instance: logging.Logger,
    level: int,
    label: str,
    data: bytes | bytearray | memoryview,
    limit: int = HEXDUMP_LIMIT,
) -> None:
    """Log *data* as ``[HEXDUMP] label: 24 00 00 34 ...`` when *level* is enabled."""
    if not logger_instance.isEnabledFor(level):
        return

    raw = bytes(data)
    dump = raw[:limit].hex(" ").upper()
    if len(raw) > limit:
        dump = f"{dump} ... ({len(raw)} bytes)"
    logger_instance.log(level, "[HEXDUMP] %s: %s", label, dump)


_TRUE_STRINGS = frozenset({"1", "true", "yes", "on", "enable", "enabled"})


def parse_bool(value: object) -> bool:
    """Interpret environment-style flags such as ``"yes"`` or ``"0"``."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS
