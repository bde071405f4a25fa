"""netprobe data models."""

from .equipment import (
    ConnectionType,
    EquipmentTarget,
    SnmpProfile,
    SnmpVersion,
    Vendor,
)
from .session import PppoeSessionInfo
from .alarm import ConnectionCheck, OltAlarm, OltDiagnosis

__all__ = [
    # Equipment
    "ConnectionType",
    "EquipmentTarget",
    "SnmpProfile",
    "SnmpVersion",
    "Vendor",
    # Sessions
    "PppoeSessionInfo",
    # Alarms
    "ConnectionCheck",
    "OltAlarm",
    "OltDiagnosis",
]
