"""Error types and the outcome wrapper used at transport boundaries."""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class NetProbeError(Exception):
    """Base class for errors raised inside netprobe."""


class TransportError(NetProbeError):
    """A device could not be reached or the session failed."""

    def __init__(self, message: str, host: str | None = None) -> None:
        super().__init__(message)
        self.host = host


class CommandTimeoutError(TransportError):
    """The remote end did not complete the exchange in time."""


class ConnectionClosedError(TransportError):
    """The remote end closed the connection before the command completed."""


class SnmpWalkError(NetProbeError):
    """The agent answered a walk with an error indication or status."""


@dataclass
class Outcome(Generic[T]):
    """Either a value or the error that prevented producing it."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` when the call failed."""
        if self.error is not None or self.value is None:
            return default
        return self.value


async def capture(awaitable: Awaitable[T], event: str, **context: Any) -> Outcome[T]:
    """Await ``awaitable`` and turn any exception into a failed Outcome.

    The failure is logged once under ``event`` with the given context, so
    callers can branch on ``outcome.ok`` without their own try/except.
    """
    try:
        return Outcome(value=await awaitable)
    except Exception as e:
        logger.warning(event, error=str(e), error_type=type(e).__name__, **context)
        return Outcome(error=e)
