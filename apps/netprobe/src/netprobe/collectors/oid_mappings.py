"""Vendor OID catalog for PPPoE session lookups.

Each vendor dialect is an ordered list of probes. A probe names the table
holding subscriber usernames and the table holding their addresses; the
resolver walks both and keeps the first probe whose username table is not
empty, so list order is probing priority.

Supported dialects:
- Mikrotik RouterOS (MIKROTIK-MIB PPP active and PPP secret tables)
- Cisco ASR/ISG (CISCO-SUBSCRIBER-SESSION-MIB)
- Huawei ME60/NE40 BRAS (HUAWEI-BRAS-SBC-MIB)
- Any device exposing IF-MIB ``<ppp-USERNAME>`` interface names
"""

from dataclasses import dataclass

from ..models.equipment import Vendor


@dataclass(frozen=True)
class OidPair:
    """A username table and the address table that shares its index."""
    name: str
    user_oid: str
    address_oid: str
    # The address table is indexed by IP and its value is the ifIndex
    address_keyed_by_ip: bool = False


# =============================================================================
# Mikrotik
# =============================================================================

MIKROTIK_PPP_ACTIVE = OidPair(
    name="Mikrotik PPP Active",
    user_oid="1.3.6.1.4.1.14988.1.1.5.1.1.1",     # mtxrPPPActiveUser
    address_oid="1.3.6.1.4.1.14988.1.1.5.1.1.2",  # mtxrPPPActiveAddress
)

MIKROTIK_PPP_SECRET = OidPair(
    name="Mikrotik PPP Secret",
    user_oid="1.3.6.1.4.1.14988.1.1.5.2.1.1",     # PPP secret name
    address_oid="1.3.6.1.4.1.14988.1.1.5.2.1.3",  # PPP secret remote address
)

# =============================================================================
# Standard RFC MIBs
# =============================================================================

IF_MIB_PPP_INTERFACES = OidPair(
    name="IF-MIB Standard",
    user_oid="1.3.6.1.2.1.2.2.1.2",        # ifDescr, "<ppp-USERNAME>"
    address_oid="1.3.6.1.2.1.4.20.1.2",    # ipAdEntIfIndex, indexed by IP
    address_keyed_by_ip=True,
)

# =============================================================================
# Cisco / Huawei
# =============================================================================

CISCO_SUBSCRIBER = OidPair(
    name="Cisco Subscriber",
    user_oid="1.3.6.1.4.1.9.9.786.1.2.1.1.11",    # csubSessionUsername
    address_oid="1.3.6.1.4.1.9.9.786.1.2.1.1.15",  # csubSessionIpAddr
)

HUAWEI_BRAS = OidPair(
    name="Huawei BRAS",
    user_oid="1.3.6.1.4.1.2011.5.2.1.14.1.2",    # hwBrasSbcUserName
    address_oid="1.3.6.1.4.1.2011.5.2.1.14.1.4",  # hwBrasSbcUserIpAddr
)

# =============================================================================
# Catalog
# =============================================================================

DEFAULT_OID_PAIRS: tuple[OidPair, ...] = (
    MIKROTIK_PPP_ACTIVE,
    MIKROTIK_PPP_SECRET,
    IF_MIB_PPP_INTERFACES,
)

VENDOR_OID_PAIRS: dict[Vendor, tuple[OidPair, ...]] = {
    Vendor.CISCO: (CISCO_SUBSCRIBER,),
    Vendor.HUAWEI: (HUAWEI_BRAS,),
    Vendor.MIKROTIK: DEFAULT_OID_PAIRS,
    Vendor.GENERIC: DEFAULT_OID_PAIRS,
}


def get_oid_pairs(vendor: Vendor) -> tuple[OidPair, ...]:
    """Return the probes to try for a vendor, in priority order."""
    return VENDOR_OID_PAIRS.get(vendor, DEFAULT_OID_PAIRS)
