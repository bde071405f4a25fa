"""PPPoE session lookup: SNMP first, one SSH listing as fallback."""

import asyncio
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from ..collectors.command_runner import run_command
from ..collectors.oid_mappings import OidPair, get_oid_pairs
from ..collectors.snmp_session import SnmpSession
from ..collectors.snmp_walker import WalkableSession, WalkResult, walk
from ..core.config import settings
from ..core.errors import capture
from ..core.logging import get_logger
from ..models.equipment import ConnectionType, EquipmentTarget, SnmpProfile
from ..models.session import PppoeSessionInfo
from .crypto import CredentialCipher, get_credential_cipher
from .parsers import get_session_listing

logger = get_logger(__name__)

PPP_INTERFACE_PATTERN = re.compile(r"<ppp-([^>]+)>", re.IGNORECASE)
NULL_ADDRESS = "0.0.0.0"
USER_SAMPLE_SIZE = 5

SessionFactory = Callable[[str, SnmpProfile], WalkableSession]
Walker = Callable[[WalkableSession, str], Awaitable[WalkResult]]
CommandRunner = Callable[..., Awaitable[str]]


@dataclass
class SnmpProbe:
    """Walk results of the OID pair that answered, if any."""
    pair: OidPair | None = None
    users: WalkResult = field(default_factory=list)
    addresses: WalkResult = field(default_factory=list)


def build_user_index(users: WalkResult) -> dict[str, str]:
    """Map lowercased username to its table index.

    IF-MIB interface names such as ``<ppp-alice>`` are reduced to the user.
    """
    index: dict[str, str] = {}
    for entry in users:
        username = entry.value
        match = PPP_INTERFACE_PATTERN.search(username)
        if match:
            username = match.group(1)
        index[username.lower()] = entry.index
    return index


def build_address_index(pair: OidPair, addresses: WalkResult) -> dict[str, str]:
    """Map table index to IP address.

    When the address table is keyed by IP (ipAdEntIfIndex), its values are
    interface indexes and the mapping is inverted.
    """
    if pair.address_keyed_by_ip:
        return {entry.value: entry.index for entry in addresses}
    return {entry.index: entry.value for entry in addresses}


class PppoeSessionResolver:
    """Resolves subscriber usernames to their current PPPoE IP addresses."""

    def __init__(
        self,
        session_factory: SessionFactory = SnmpSession,
        walker: Walker = walk,
        command_runner: CommandRunner = run_command,
        cipher: CredentialCipher | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._walker = walker
        self._command_runner = command_runner
        self.cipher = cipher or get_credential_cipher()

    async def resolve_sessions(
        self,
        equipment: EquipmentTarget,
        usernames: Sequence[str],
        snmp_profile: SnmpProfile | None = None,
        password: str | None = None,
    ) -> dict[str, PppoeSessionInfo]:
        """Look up many subscribers on one concentrator.

        SNMP results are authoritative. The SSH listing is only tried when
        SNMP resolved nobody and the record carries SSH credentials.
        ``password`` overrides the stored SSH password.
        """
        if not usernames:
            return {}

        results = await self._lookup_via_snmp(equipment, usernames, snmp_profile)

        if not results and equipment.has_terminal_credentials:
            logger.info("pppoe_ssh_fallback", equipment=equipment.name, requested=len(usernames))
            results = await self._lookup_via_ssh(equipment, usernames, password)

        return results

    async def resolve_session(
        self,
        equipment: EquipmentTarget,
        username: str,
        snmp_profile: SnmpProfile | None = None,
        password: str | None = None,
    ) -> PppoeSessionInfo | None:
        """Look up a single subscriber."""
        results = await self.resolve_sessions(equipment, [username], snmp_profile, password)
        return results.get(username)

    async def probe(self, session: WalkableSession, pairs: Sequence[OidPair]) -> SnmpProbe:
        """Try each OID pair in order and keep the first with any users."""
        for pair in pairs:
            users, addresses = await asyncio.gather(
                self._walker(session, pair.user_oid),
                self._walker(session, pair.address_oid),
            )
            logger.info(
                "pppoe_snmp_probe",
                oid_set=pair.name,
                users=len(users),
                addresses=len(addresses),
            )
            if users:
                return SnmpProbe(pair=pair, users=users, addresses=addresses)
        return SnmpProbe()

    def match_sessions(self, probe: SnmpProbe, usernames: Sequence[str]) -> dict[str, PppoeSessionInfo]:
        """Pair requested usernames with the walked tables."""
        results: dict[str, PppoeSessionInfo] = {}
        if probe.pair is None:
            return results

        user_index = build_user_index(probe.users)
        ip_by_index = build_address_index(probe.pair, probe.addresses)

        for username in usernames:
            idx = user_index.get(username.lower())
            if idx is None:
                self._log_partial_match(username, probe.users)
                continue
            ip_address = ip_by_index.get(idx)
            if ip_address and ip_address != NULL_ADDRESS:
                results[username] = PppoeSessionInfo(username=username, ip_address=ip_address)
        return results

    def _log_partial_match(self, username: str, users: WalkResult) -> None:
        # Diagnostic only: naming drift between the ERP and the concentrator
        wanted = username.lower()
        for entry in users:
            reported = entry.value.lower()
            if wanted in reported or reported in wanted:
                logger.info("pppoe_snmp_partial_match", requested=username, reported=entry.value)
                return

    def _decrypt_profile(self, profile: SnmpProfile) -> SnmpProfile:
        return profile.model_copy(
            update={
                "community": self.cipher.decrypt(profile.community) or None,
                "auth_password": self.cipher.decrypt(profile.auth_password) or None,
                "priv_password": self.cipher.decrypt(profile.priv_password) or None,
            }
        )

    async def _lookup_via_snmp(
        self,
        equipment: EquipmentTarget,
        usernames: Sequence[str],
        snmp_profile: SnmpProfile | None,
    ) -> dict[str, PppoeSessionInfo]:
        if not equipment.address:
            logger.info("pppoe_snmp_no_address", equipment=equipment.name)
            return {}

        profile = self._decrypt_profile(snmp_profile) if snmp_profile else SnmpProfile()
        logger.info(
            "pppoe_snmp_lookup",
            equipment=equipment.name,
            vendor=equipment.vendor.value,
            requested=len(usernames),
        )
        outcome = await capture(
            self._snmp_lookup(equipment, usernames, profile),
            event="pppoe_snmp_error",
            equipment=equipment.name,
        )
        return outcome.unwrap_or({})

    async def _snmp_lookup(
        self,
        equipment: EquipmentTarget,
        usernames: Sequence[str],
        profile: SnmpProfile,
    ) -> dict[str, PppoeSessionInfo]:
        session = self._session_factory(equipment.address, profile)
        try:
            probe = await self.probe(session, get_oid_pairs(equipment.vendor))
        finally:
            session.close()

        sample = [entry.value for entry in probe.users[:USER_SAMPLE_SIZE]]
        logger.info(
            "pppoe_snmp_walk_complete",
            equipment=equipment.name,
            oid_set=probe.pair.name if probe.pair else None,
            users=len(probe.users),
            sample=sample,
        )

        results = self.match_sessions(probe, usernames)
        logger.info(
            "pppoe_snmp_sessions_found",
            equipment=equipment.name,
            found=len(results),
            requested=len(usernames),
        )
        return results

    async def _lookup_via_ssh(
        self,
        equipment: EquipmentTarget,
        usernames: Sequence[str],
        password: str | None,
    ) -> dict[str, PppoeSessionInfo]:
        if not equipment.username or not equipment.address:
            return {}
        ssh_password = password or self.cipher.decrypt(equipment.password)
        if not ssh_password:
            return {}

        listing = get_session_listing(equipment.vendor)
        outcome = await capture(
            self._command_runner(
                equipment,
                listing.command,
                timeout=settings.ssh_command_timeout,
                password=ssh_password,
                connection_type=ConnectionType.SSH,
            ),
            event="pppoe_ssh_error",
            equipment=equipment.name,
        )
        if not outcome.ok:
            return {}

        output = outcome.value or ""
        results: dict[str, PppoeSessionInfo] = {}
        for username in usernames:
            session = listing.parse(output, username)
            if session is not None and session.ip_address:
                results[username] = session

        logger.info(
            "pppoe_ssh_sessions_found",
            equipment=equipment.name,
            found=len(results),
            requested=len(usernames),
        )
        return results


async def resolve_sessions(
    equipment: EquipmentTarget,
    usernames: Sequence[str],
    snmp_profile: SnmpProfile | None = None,
    password: str | None = None,
) -> dict[str, PppoeSessionInfo]:
    """Resolve many subscribers with the default transports."""
    return await PppoeSessionResolver().resolve_sessions(equipment, usernames, snmp_profile, password)


async def resolve_session(
    equipment: EquipmentTarget,
    username: str,
    snmp_profile: SnmpProfile | None = None,
    password: str | None = None,
) -> PppoeSessionInfo | None:
    """Resolve one subscriber with the default transports."""
    return await PppoeSessionResolver().resolve_session(equipment, username, snmp_profile, password)
