"""SNMP session adapter built on the pysnmp asyncio API."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from pysnmp.hlapi.v3arch.asyncio import (
    bulk_walk_cmd,
    walk_cmd,
    CommunityData,
    UsmUserData,
    UdpTransportTarget,
    ContextData,
    ObjectType,
    ObjectIdentity,
    SnmpEngine,
)
from pysnmp.hlapi.v3arch.asyncio import (
    USM_AUTH_HMAC96_MD5,
    USM_AUTH_HMAC96_SHA,
    USM_AUTH_NONE,
    USM_PRIV_CBC56_DES,
    USM_PRIV_CFB128_AES,
    USM_PRIV_NONE,
)

from ..core.config import settings
from ..core.errors import SnmpWalkError
from ..core.logging import get_logger
from ..models.equipment import SnmpProfile, SnmpVersion

logger = get_logger(__name__)

NO_AUTH_NO_PRIV = "noAuthNoPriv"
AUTH_NO_PRIV = "authNoPriv"
AUTH_PRIV = "authPriv"

SECURITY_LEVELS = (NO_AUTH_NO_PRIV, AUTH_NO_PRIV, AUTH_PRIV)

# Auth protocol mapping
AUTH_PROTOCOLS = {
    "MD5": USM_AUTH_HMAC96_MD5,
    "SHA": USM_AUTH_HMAC96_SHA,
    "none": USM_AUTH_NONE,
}

# Privacy protocol mapping
PRIV_PROTOCOLS = {
    "DES": USM_PRIV_CBC56_DES,
    "AES": USM_PRIV_CFB128_AES,
    "none": USM_PRIV_NONE,
}


@dataclass(frozen=True)
class SecurityParameters:
    """The three SNMPv3 axes after degrading unknown values."""
    level: str
    auth_protocol: str
    priv_protocol: str


def _normalize_protocol(value: str | None, known: dict[str, Any]) -> str:
    if not value:
        return "none"
    key = value.strip().upper()
    return key if key in known else "none"


def resolve_security(profile: SnmpProfile) -> SecurityParameters:
    """Map profile fields onto level/auth/priv, falling back towards none.

    Field devices often advertise partial v3 support, so anything missing or
    unrecognized lowers the effective level instead of failing the query.
    """
    auth = _normalize_protocol(profile.auth_protocol, AUTH_PROTOCOLS)
    priv = _normalize_protocol(profile.priv_protocol, PRIV_PROTOCOLS)
    level = profile.security_level if profile.security_level in SECURITY_LEVELS else NO_AUTH_NO_PRIV

    if level != NO_AUTH_NO_PRIV and (auth == "none" or not profile.auth_password):
        level = NO_AUTH_NO_PRIV
    if level == AUTH_PRIV and (priv == "none" or not profile.priv_password):
        level = AUTH_NO_PRIV

    if level == NO_AUTH_NO_PRIV:
        return SecurityParameters(level, "none", "none")
    if level == AUTH_NO_PRIV:
        return SecurityParameters(level, auth, "none")
    return SecurityParameters(level, auth, priv)


def build_auth_data(profile: SnmpProfile) -> CommunityData | UsmUserData:
    """Build pysnmp authentication data for a profile."""
    if profile.version != SnmpVersion.V3:
        community = profile.community or settings.snmp_community
        mp_model = 0 if profile.version == SnmpVersion.V1 else 1
        return CommunityData(community, mpModel=mp_model)

    security = resolve_security(profile)
    username = profile.username or ""

    if security.level == NO_AUTH_NO_PRIV:
        return UsmUserData(username)
    elif security.level == AUTH_NO_PRIV:
        return UsmUserData(
            username,
            authKey=profile.auth_password,
            authProtocol=AUTH_PROTOCOLS[security.auth_protocol],
        )
    else:  # authPriv
        return UsmUserData(
            username,
            authKey=profile.auth_password,
            authProtocol=AUTH_PROTOCOLS[security.auth_protocol],
            privKey=profile.priv_password,
            privProtocol=PRIV_PROTOCOLS[security.priv_protocol],
        )


class SnmpSession:
    """One SNMP session against a single agent.

    The session may serve several sequential or concurrent walks within one
    logical query. The caller closes it when the query is done; closing is
    idempotent so every exit path can call ``close()``.
    """

    def __init__(self, address: str, profile: SnmpProfile | None = None) -> None:
        self.address = address
        self.profile = profile or SnmpProfile()
        self.auth_data = build_auth_data(self.profile)
        self.engine = SnmpEngine()
        self._target: UdpTransportTarget | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _get_target(self) -> UdpTransportTarget:
        if self._target is None:
            self._target = await UdpTransportTarget.create(
                (self.address, self.profile.port),
                timeout=self.profile.timeout / 1000,
                retries=self.profile.retries,
            )
        return self._target

    async def subtree(self, base_oid: str) -> AsyncIterator[list[tuple[str, Any]]]:
        """Yield the varbinds of each response while walking ``base_oid``.

        GETBULK is used for v2c/v3; v1 agents get a GETNEXT walk.
        """
        if self._closed:
            raise SnmpWalkError(f"session to {self.address} is closed")

        target = await self._get_target()
        object_type = ObjectType(ObjectIdentity(base_oid))

        if self.profile.version == SnmpVersion.V1:
            responses = walk_cmd(
                self.engine,
                self.auth_data,
                target,
                ContextData(),
                object_type,
                lexicographicMode=False,
            )
        else:
            responses = bulk_walk_cmd(
                self.engine,
                self.auth_data,
                target,
                ContextData(),
                0,
                settings.snmp_max_repetitions,
                object_type,
                lexicographicMode=False,
            )

        async for error_indication, error_status, error_index, var_binds in responses:
            if error_indication:
                raise SnmpWalkError(str(error_indication))
            if error_status:
                raise SnmpWalkError(f"{error_status.prettyPrint()} at index {error_index}")
            yield [(str(var_bind[0]), var_bind[1]) for var_bind in var_binds]

    def close(self) -> None:
        """Release the engine's transport; later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        try:
            self.engine.close_dispatcher()
        except Exception as e:
            logger.debug("snmp_session_close_error", ip=self.address, error=str(e))
