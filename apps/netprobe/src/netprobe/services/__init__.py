"""Business logic services for netprobe."""

from .olt import OltAlarmDiagnoser, diagnose, diagnosis_from_alarms, query_all_alarms
from .pppoe import PppoeSessionResolver, resolve_session, resolve_sessions

__all__ = [
    "OltAlarmDiagnoser",
    "PppoeSessionResolver",
    "diagnose",
    "diagnosis_from_alarms",
    "query_all_alarms",
    "resolve_session",
    "resolve_sessions",
]
