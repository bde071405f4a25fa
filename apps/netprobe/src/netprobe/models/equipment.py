"""Equipment and SNMP profile records supplied by the equipment registry."""

from enum import Enum

import netaddr
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.config import settings


class Vendor(str, Enum):
    """Vendor dialects understood by the query subsystem."""
    MIKROTIK = "mikrotik"
    CISCO = "cisco"
    HUAWEI = "huawei"
    GENERIC = "generic"


class ConnectionType(str, Enum):
    """Interactive transport used to reach the equipment CLI."""
    SSH = "ssh"
    TELNET = "telnet"


class SnmpVersion(str, Enum):
    """SNMP version enumeration."""
    V1 = "1"
    V2C = "2c"
    V3 = "3"


class SnmpProfile(BaseModel):
    """SNMP access parameters for one piece of equipment.

    Protocol and security-level fields are kept as free text because the
    registry stores whatever the operator typed; the session adapter decides
    how to interpret them.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    version: SnmpVersion = Field(default=SnmpVersion.V2C)
    port: int = Field(default_factory=lambda: settings.snmp_port, ge=1, le=65535)
    community: str | None = None
    # SNMPv3
    username: str | None = None
    security_level: str | None = None
    auth_protocol: str | None = None
    auth_password: str | None = None
    priv_protocol: str | None = None
    priv_password: str | None = None
    # Per-request timeout in milliseconds
    timeout: int = Field(default_factory=lambda: settings.snmp_timeout_ms, ge=1)
    retries: int = Field(default_factory=lambda: settings.snmp_retries, ge=0)

    @field_validator("version", mode="before")
    @classmethod
    def normalize_version(cls, v: object) -> object:
        """Accept "1", "v1", "2c", "v2c", "3" and "v3" in any case."""
        if v is None:
            return SnmpVersion.V2C
        if isinstance(v, SnmpVersion):
            return v
        text = str(v).strip().lower()
        if text.startswith("v"):
            text = text[1:]
        if text == "2":
            text = "2c"
        return text


class EquipmentTarget(BaseModel):
    """A concentrator or OLT as read from the equipment registry."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int | str | None = None
    name: str = ""
    address: str | None = Field(None, description="Management IP address")
    vendor: Vendor = Field(default=Vendor.MIKROTIK)
    connection_type: ConnectionType = Field(default=ConnectionType.SSH)
    port: int | None = Field(None, ge=1, le=65535, description="SSH/Telnet port")
    username: str | None = None
    password: str | None = None
    snmp_profile_id: int | str | None = None

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        """Validate IP address format; blank means not configured."""
        if v is None:
            return None
        v = str(v).strip()
        if not v:
            return None
        try:
            netaddr.IPAddress(v)
            return v
        except (netaddr.AddrFormatError, ValueError) as e:
            raise ValueError(f"Invalid IP address: {v}") from e

    @field_validator("vendor", mode="before")
    @classmethod
    def normalize_vendor(cls, v: object) -> object:
        """Map free-text vendor names onto a known dialect."""
        if v is None or isinstance(v, Vendor):
            return v if v is not None else Vendor.MIKROTIK
        text = str(v).strip().lower()
        if not text:
            return Vendor.MIKROTIK
        for vendor in Vendor:
            if vendor.value in text:
                return vendor
        return Vendor.GENERIC

    @field_validator("connection_type", mode="before")
    @classmethod
    def normalize_connection_type(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower() or ConnectionType.SSH
        return v if v is not None else ConnectionType.SSH

    @property
    def terminal_port(self) -> int:
        """Port for the interactive session, defaulting per transport."""
        return self.terminal_port_for(self.connection_type)

    def terminal_port_for(self, connection_type: ConnectionType) -> int:
        if self.port:
            return self.port
        if connection_type == ConnectionType.TELNET:
            return settings.telnet_port
        return settings.ssh_port

    @property
    def has_terminal_credentials(self) -> bool:
        return bool(self.username and self.password)
