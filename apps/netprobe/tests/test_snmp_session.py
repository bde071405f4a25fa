import pytest
from pysnmp.proto.rfc1902 import Integer, ObjectName, OctetString
from pysnmp.hlapi.v3arch.asyncio import CommunityData, UsmUserData

from netprobe.collectors.snmp_session import (
    AUTH_NO_PRIV,
    AUTH_PRIV,
    NO_AUTH_NO_PRIV,
    SnmpSession,
    build_auth_data,
    resolve_security,
)
from netprobe.core.errors import SnmpWalkError
from netprobe.models.equipment import SnmpProfile

# --- Security degradation ---

def test_full_auth_priv_profile_is_kept():
    profile = SnmpProfile(
        version="3",
        username="probe",
        security_level="authPriv",
        auth_protocol="sha",
        auth_password="authpass123",
        priv_protocol="aes",
        priv_password="privpass123",
    )
    security = resolve_security(profile)
    assert security.level == AUTH_PRIV
    assert security.auth_protocol == "SHA"
    assert security.priv_protocol == "AES"

def test_unknown_auth_protocol_degrades_to_no_auth():
    profile = SnmpProfile(
        version="3", security_level="authPriv", auth_protocol="SHA512", auth_password="x" * 8
    )
    security = resolve_security(profile)
    assert security.level == NO_AUTH_NO_PRIV
    assert security.auth_protocol == "none"
    assert security.priv_protocol == "none"

def test_missing_priv_password_degrades_to_auth_no_priv():
    profile = SnmpProfile(
        version="3",
        security_level="authPriv",
        auth_protocol="MD5",
        auth_password="authpass123",
        priv_protocol="DES",
    )
    security = resolve_security(profile)
    assert security.level == AUTH_NO_PRIV
    assert security.auth_protocol == "MD5"
    assert security.priv_protocol == "none"

def test_unrecognized_security_level_is_no_auth():
    profile = SnmpProfile(version="3", security_level="paranoid")
    assert resolve_security(profile).level == NO_AUTH_NO_PRIV

# --- Auth data ---

def test_v2c_uses_default_community():
    auth = build_auth_data(SnmpProfile(version="v2c"))
    assert isinstance(auth, CommunityData)
    assert auth.mpModel == 1

def test_v1_uses_message_model_zero():
    auth = build_auth_data(SnmpProfile(version="1", community="private"))
    assert isinstance(auth, CommunityData)
    assert auth.mpModel == 0

def test_v3_builds_usm_user():
    auth = build_auth_data(
        SnmpProfile(version="V3", username="probe", security_level="authNoPriv",
                    auth_protocol="SHA", auth_password="authpass123")
    )
    assert isinstance(auth, UsmUserData)

# --- Session lifecycle ---

def test_close_is_idempotent(mocker):
    session = SnmpSession("192.0.2.1")
    close_dispatcher = mocker.patch.object(session.engine, "close_dispatcher")
    session.close()
    session.close()
    assert session.closed
    close_dispatcher.assert_called_once()

async def test_subtree_on_closed_session_raises(mocker):
    session = SnmpSession("192.0.2.1")
    mocker.patch.object(session.engine, "close_dispatcher")
    session.close()
    with pytest.raises(SnmpWalkError):
        async for _ in session.subtree("1.3.6.1.2.1.1"):
            pass

# --- Subtree walks ---

IF_DESCR_1 = "1.3.6.1.2.1.2.2.1.2.1"


def responses(*rows):
    async def generate(*args, **kwargs):
        for row in rows:
            yield row
    return generate


@pytest.fixture
def walk_session(mocker):
    def build(version, *rows):
        session = SnmpSession("192.0.2.1", SnmpProfile(version=version))
        mocker.patch.object(session, "_get_target", mocker.AsyncMock(return_value=object()))
        walk = mocker.patch(
            "netprobe.collectors.snmp_session.walk_cmd", side_effect=responses(*rows)
        )
        bulk = mocker.patch(
            "netprobe.collectors.snmp_session.bulk_walk_cmd", side_effect=responses(*rows)
        )
        return session, walk, bulk
    return build


async def collect(session, oid="1.3.6.1.2.1.2.2.1.2"):
    return [item async for batch in session.subtree(oid) for item in batch]


async def test_v1_walks_with_getnext(walk_session):
    row = (None, 0, 0, [(ObjectName(IF_DESCR_1), OctetString("ether1"))])
    session, walk, bulk = walk_session("1", row)

    items = await collect(session)

    walk.assert_called_once()
    bulk.assert_not_called()
    assert items == [(IF_DESCR_1, OctetString("ether1"))]


async def test_v2c_walks_with_getbulk(walk_session):
    row = (None, 0, 0, [(ObjectName(IF_DESCR_1), OctetString("ether1"))])
    session, walk, bulk = walk_session("2c", row)

    items = await collect(session)

    bulk.assert_called_once()
    walk.assert_not_called()
    assert items == [(IF_DESCR_1, OctetString("ether1"))]


async def test_each_varbind_becomes_oid_text_and_value(walk_session):
    row = (
        None,
        0,
        0,
        [
            (ObjectName(IF_DESCR_1), OctetString("ether1")),
            (ObjectName("1.3.6.1.2.1.2.2.1.2.2"), OctetString("<pppoe-alice>")),
        ],
    )
    session, _, _ = walk_session("2c", row)

    items = await collect(session)

    assert [oid for oid, _ in items] == [IF_DESCR_1, "1.3.6.1.2.1.2.2.1.2.2"]
    assert all(isinstance(oid, str) for oid, _ in items)
    assert items[1][1] == OctetString("<pppoe-alice>")


async def test_error_indication_raises(walk_session):
    session, _, _ = walk_session("2c", ("requestTimedOut", 0, 0, []))
    with pytest.raises(SnmpWalkError, match="requestTimedOut"):
        await collect(session)


async def test_error_status_raises(walk_session):
    session, _, _ = walk_session("1", (None, Integer(2), 1, []))
    with pytest.raises(SnmpWalkError, match="at index 1"):
        await collect(session)


async def test_rows_before_an_error_are_yielded(walk_session):
    good = (None, 0, 0, [(ObjectName(IF_DESCR_1), OctetString("ether1"))])
    session, _, _ = walk_session("2c", good, ("requestTimedOut", 0, 0, []))

    seen = []
    with pytest.raises(SnmpWalkError):
        async for batch in session.subtree("1.3.6.1.2.1.2.2.1.2"):
            seen.extend(batch)

    assert seen == [(IF_DESCR_1, OctetString("ether1"))]
