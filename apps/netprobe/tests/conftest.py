"""Shared fixtures: fake SNMP sessions and equipment records."""

import asyncio
from typing import Any

import pytest
from pysnmp.proto.rfc1902 import OctetString

from netprobe.core.errors import SnmpWalkError
from netprobe.models.equipment import EquipmentTarget


def _varbind_value(value: Any) -> Any:
    return OctetString(value) if isinstance(value, str) else value


class FakeSnmpSession:
    """Serves canned tables as pysnmp varbinds, keyed by base OID."""

    def __init__(
        self,
        tables: dict[str, dict[str, Any]] | None = None,
        fail_after: dict[str, int] | None = None,
    ) -> None:
        self.tables = tables or {}
        # base OID -> number of rows served before the agent errors out
        self.fail_after = fail_after or {}
        self.walked: list[str] = []
        self.close_calls = 0

    async def subtree(self, base_oid: str):
        self.walked.append(base_oid)
        rows = self.tables.get(base_oid, {})
        limit = self.fail_after.get(base_oid)
        for served, (index, value) in enumerate(rows.items()):
            if limit is not None and served >= limit:
                break
            await asyncio.sleep(0)
            yield [(f"{base_oid}.{index}", _varbind_value(value))]
        if limit is not None:
            raise SnmpWalkError(f"requestTimedOut on {base_oid}")

    def close(self) -> None:
        self.close_calls += 1


class HangingSnmpSession(FakeSnmpSession):
    """An agent that never answers."""

    async def subtree(self, base_oid: str):
        self.walked.append(base_oid)
        await asyncio.sleep(3600)
        yield []


class FakeCommandRunner:
    """Stands in for run_command and records every call."""

    def __init__(self, output="", error=None):
        self.output = output
        self.error = error
        self.calls = []

    async def __call__(self, target, command, **kwargs):
        self.calls.append((target, command, kwargs))
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def mikrotik():
    return EquipmentTarget(
        id=1,
        name="bng-core-01",
        address="10.10.0.1",
        vendor="Mikrotik",
        username="admin",
        password="secret",
    )


@pytest.fixture
def mikrotik_without_ssh():
    return EquipmentTarget(id=2, name="bng-edge-02", address="10.10.0.2", vendor="mikrotik")


@pytest.fixture
def olt():
    return EquipmentTarget(
        id=10,
        name="olt-centro",
        address="10.20.0.1",
        vendor="generic",
        connection_type="telnet",
        username="zte",
        password="zte",
    )
