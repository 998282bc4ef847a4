"""Command line entry point: ``lifxlan discover``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import Any

import msgspec

from .config.logging import configure_logging
from .config.settings import load_client_config
from .device import Device
from .services.discovery import discover
from .services.flow import UnhandledMessageError

logger = logging.getLogger("lifxlan.cli")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifxlan",
        description="Talk to LIFX devices on the local network.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    discover_parser = subparsers.add_parser("discover", help="Broadcast GetService and list responders.")
    discover_parser.add_argument(
        "--timeout",
        type=float,
        help="How long to listen for replies in seconds (default: LIFXLAN_DISCOVERY_TIMEOUT).",
    )
    discover_parser.add_argument(
        "--probe",
        action="store_true",
        help="Also ask every device for its label and hardware version.",
    )
    discover_parser.add_argument(
        "--request-timeout",
        type=float,
        default=1.0,
        help="Per-device timeout for --probe requests (default: %(default)s).",
    )
    return parser


async def describe(device: Device, *, probe: bool, timeout: float) -> dict[str, Any]:
    info: dict[str, Any] = {
        "target": str(device.target),
        "host": device.host,
        "port": device.port,
    }
    if not probe:
        return info

    try:
        async with device.connection() as conn:
            info["label"] = await device.get_label(conn, timeout=timeout)
            version = await device.get_hardware_version(conn, timeout=timeout)
    except (TimeoutError, OSError, UnhandledMessageError) as exc:
        logger.warning("Probing %s failed: %s", device.target, exc)
        info["error"] = str(exc)
        return info

    info["vendor_id"] = version.vendor_id
    info["product_id"] = version.product_id
    product = device.product
    info["product"] = product.name if product is not None else None
    return info


async def run_discover(args: argparse.Namespace) -> int:
    try:
        config = load_client_config()
    except ValueError as exc:
        logger.critical("%s", exc)
        sys.stderr.write(f"lifxlan: {exc}\n")
        return 1
    configure_logging(config)

    found = 0
    async for device in discover(config, timeout=args.timeout):
        info = await describe(device, probe=args.probe, timeout=args.request_timeout)
        sys.stdout.write(msgspec.json.encode(info).decode() + "\n")
        sys.stdout.flush()
        found += 1

    logger.info("Discovery finished with %d device(s)", found)
    return 0


async def main_async(argv: Sequence[str]) -> int:
    args = build_arg_parser().parse_args(argv)
    if args.command == "discover":
        return await run_discover(args)
    return 2


def main() -> None:
    try:
        exit_code = asyncio.run(main_async(sys.argv[1:]))
    except KeyboardInterrupt:
        exit_code = 130
    except OSError as exc:
        logger.critical("Network error: %s", exc, exc_info=True)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
