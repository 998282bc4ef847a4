"""Tests for the logging configuration."""

from __future__ import annotations

import json
import logging
import sys

from lifxlan.config import logging as log_mod
from lifxlan.config.model import ClientConfig
from lifxlan.protocol.protocol import MessageType
from lifxlan.protocol.target import Target
from lifxlan.util import log_hexdump


def _record(name: str, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_structured_formatter_trims_prefix_and_renders_extras() -> None:
    record = _record("lifxlan.service.flow")
    record.datagram = b"\x24\x00\x00\x14"  # type: ignore[attr-defined]
    record.peer = ("127.0.0.1", 56700)  # type: ignore[attr-defined]
    record.message_type = MessageType.STATE_LABEL  # type: ignore[attr-defined]
    record.target = Target.parse("d0:73:d5:01:02:03")  # type: ignore[attr-defined]
    record.sequence = 7  # type: ignore[attr-defined]

    payload = json.loads(log_mod.StructuredLogFormatter().format(record))

    assert payload["logger"] == "service.flow"
    assert payload["level"] == "INFO"
    assert payload["message"] == "hello"
    assert payload["ts"].endswith("Z")
    assert payload["extra"] == {
        "datagram": "[24 00 00 14]",
        "peer": "('127.0.0.1', 56700)",
        "message_type": "STATE_LABEL",
        "target": "d0:73:d5:01:02:03",
        "sequence": 7,
    }


def test_structured_formatter_keeps_foreign_logger_names() -> None:
    payload = json.loads(log_mod.StructuredLogFormatter().format(_record("asyncio")))
    assert payload["logger"] == "asyncio"
    assert "extra" not in payload


def test_structured_formatter_includes_exception() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("lifxlan.cli", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info())
    payload = json.loads(log_mod.StructuredLogFormatter().format(record))
    assert "ValueError: boom" in payload["exception"]


def test_configure_logging_json_and_text() -> None:
    log_mod.configure_logging(ClientConfig(debug_logging=True))
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(handler.formatter, log_mod.StructuredLogFormatter) for handler in root.handlers)

    log_mod.configure_logging(ClientConfig(log_format="text"))
    root = logging.getLogger()
    assert root.level == logging.INFO
    formatters = [handler.formatter for handler in root.handlers]
    assert not any(isinstance(formatter, log_mod.StructuredLogFormatter) for formatter in formatters)
    assert any(formatter is not None and formatter._fmt == log_mod.TEXT_FORMAT for formatter in formatters)


def test_log_hexdump_only_when_enabled(caplog) -> None:
    logger = logging.getLogger("lifxlan.test")
    with caplog.at_level(logging.INFO, logger="lifxlan.test"):
        log_hexdump(logger, logging.DEBUG, "TX", b"\x01\x02")
        assert not caplog.records
        log_hexdump(logger, logging.INFO, "TX", b"\x01\xab")
    assert caplog.records[0].getMessage() == "[HEXDUMP] TX: 01 AB"


def test_log_hexdump_truncates_long_datagrams(caplog) -> None:
    logger = logging.getLogger("lifxlan.test")
    with caplog.at_level(logging.DEBUG, logger="lifxlan.test"):
        log_hexdump(logger, logging.DEBUG, "RX", bytes(10), limit=4)
    assert caplog.records[0].getMessage() == "[HEXDUMP] RX: 00 00 00 00 ... (10 bytes)"
