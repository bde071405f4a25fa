"""netprobe - multi-vendor network equipment query subsystem.

Resolves PPPoE subscribers to IP addresses on access concentrators and
diagnoses ONU alarms on OLTs over SNMP, SSH and Telnet.
"""

from .models import ConnectionCheck, EquipmentTarget, OltAlarm, OltDiagnosis, PppoeSessionInfo, SnmpProfile
from .services import (
    OltAlarmDiagnoser,
    PppoeSessionResolver,
    diagnose,
    diagnosis_from_alarms,
    query_all_alarms,
    resolve_session,
    resolve_sessions,
)

__version__ = "0.1.0"

__all__ = [
    "ConnectionCheck",
    "EquipmentTarget",
    "OltAlarm",
    "OltDiagnosis",
    "OltAlarmDiagnoser",
    "PppoeSessionInfo",
    "PppoeSessionResolver",
    "SnmpProfile",
    "diagnose",
    "diagnosis_from_alarms",
    "query_all_alarms",
    "resolve_session",
    "resolve_sessions",
]
