"""Core module for netprobe."""

from .config import settings, get_settings
from .logging import configure_logging, get_logger
from .errors import (
    NetProbeError,
    TransportError,
    CommandTimeoutError,
    ConnectionClosedError,
    SnmpWalkError,
    Outcome,
    capture,
)

__all__ = [
    "settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "NetProbeError",
    "TransportError",
    "CommandTimeoutError",
    "ConnectionClosedError",
    "SnmpWalkError",
    "Outcome",
    "capture",
]
