"""PPPoE session models."""

from pydantic import BaseModel


class PppoeSessionInfo(BaseModel):
    """Current PPPoE session of one subscriber as seen by a concentrator."""

    username: str
    ip_address: str | None = None
    # Not exposed by any of the supported dialects yet
    mac_address: str | None = None
    uptime: str | None = None
    interface: str | None = None
