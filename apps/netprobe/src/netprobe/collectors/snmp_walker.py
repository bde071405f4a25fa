"""Bounded-time SNMP subtree walks with value normalization."""

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol
from collections.abc import AsyncIterator

from pysnmp.proto.rfc1902 import (
    Counter32,
    Counter64,
    Gauge32,
    Integer,
    Integer32,
    IpAddress,
    ObjectIdentifier,
    OctetString,
    TimeTicks,
    Unsigned32,
)
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from ..core.config import settings
from ..core.logging import get_logger

logger = get_logger(__name__)

NUMERIC_TYPES = (Integer, Integer32, Counter32, Counter64, Gauge32, TimeTicks, Unsigned32)
ERROR_TYPES = (NoSuchObject, NoSuchInstance, EndOfMibView)


class WalkableSession(Protocol):
    """Anything that can stream the varbinds under an OID."""

    def subtree(self, base_oid: str) -> AsyncIterator[list[tuple[str, Any]]]: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class WalkEntry:
    """One varbind of a walk: OID suffix relative to the base and its value."""
    index: str
    value: str


WalkResult = list[WalkEntry]


def decode_value(value: Any) -> str | None:
    """Render a varbind value as text, or None for protocol error markers."""
    if isinstance(value, ERROR_TYPES):
        return None
    if isinstance(value, IpAddress):
        return value.prettyPrint()
    if isinstance(value, OctetString):
        text = value.asOctets().decode("utf-8", errors="replace")
        return text.replace("\x00", "").strip()
    if isinstance(value, NUMERIC_TYPES):
        return str(int(value))
    if isinstance(value, ObjectIdentifier):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").replace("\x00", "").strip()
    if isinstance(value, (int, str)):
        return str(value).strip()
    pretty = getattr(value, "prettyPrint", None)
    return pretty().strip() if pretty else str(value).strip()


async def walk(
    session: WalkableSession,
    base_oid: str,
    timeout: float | None = None,
) -> WalkResult:
    """Walk ``base_oid`` and return every non-empty value found under it.

    Never raises. On an agent error the entries gathered so far are
    returned; on timeout the session is closed as well, which also aborts
    any other walk still running on it.
    """
    timeout = settings.snmp_walk_timeout if timeout is None else timeout
    base_oid = base_oid.strip(".")
    prefix = base_oid + "."
    results: WalkResult = []

    async def collect() -> None:
        async for var_binds in session.subtree(base_oid):
            for oid, value in var_binds:
                oid = oid.lstrip(".")
                if not oid.startswith(prefix):
                    continue
                decoded = decode_value(value)
                if decoded:
                    results.append(WalkEntry(index=oid[len(prefix):], value=decoded))

    try:
        await asyncio.wait_for(collect(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("snmp_walk_timeout", oid=base_oid, timeout=timeout, collected=len(results))
        session.close()
    except Exception as e:
        logger.warning("snmp_walk_error", oid=base_oid, error=str(e), collected=len(results))

    return results
