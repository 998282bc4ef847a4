"""Request flow and discovery services for the LIFX LAN client."""

from .flow import UnhandledMessageError, WaitForAcksError, read_next_response, read_response, wait_for_acks

__all__ = [
    "UnhandledMessageError",
    "WaitForAcksError",
    "read_next_response",
    "read_response",
    "wait_for_acks",
]
