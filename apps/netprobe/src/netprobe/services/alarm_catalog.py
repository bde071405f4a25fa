"""GPON alarm codes and the field diagnosis each one points to."""

from dataclasses import dataclass

FIBER_BREAK = "Fiber break"
POWER_LOSS = "Power loss"
FIBER_ATTENUATION = "Fiber attenuation"
COMMUNICATION_PROBLEM = "Communication problem"

UNKNOWN_ALARM = "Unknown Alarm"
NO_ACTIVE_ALARMS = "No active alarms"
NO_ALARMS_DESCRIPTION = "No alarms found for this ONU"
QUERY_ERROR = "Query Error"


@dataclass(frozen=True)
class AlarmDiagnosis:
    diagnosis: str
    description: str


ALARM_DIAGNOSES: dict[str, AlarmDiagnosis] = {
    "GPON_LOSi": AlarmDiagnosis(
        FIBER_BREAK, "ONU Loss of signal - optical signal lost"
    ),
    "GPON_DGi": AlarmDiagnosis(
        POWER_LOSS, "ONU Dying Gasp - equipment lost power"
    ),
    "GPON_DOWi": AlarmDiagnosis(
        FIBER_ATTENUATION, "ONU Downstream wavelength drift - attenuation problem"
    ),
    "GPON_SUFi": AlarmDiagnosis(
        FIBER_ATTENUATION, "ONU Start-up failure - start-up failed due to attenuation"
    ),
    "GPON_LOAMi": AlarmDiagnosis(
        FIBER_ATTENUATION, "ONU Loss of PLOAM - control messages lost"
    ),
    "GPON_LCDGi": AlarmDiagnosis(
        FIBER_ATTENUATION, "ONU Loss of GEM channel delineation - channel misalignment"
    ),
    "GPON_RDi": AlarmDiagnosis(
        COMMUNICATION_PROBLEM, "ONU Remote defect indication - remote defect reported"
    ),
}


def lookup_alarm(name: str) -> AlarmDiagnosis | None:
    return ALARM_DIAGNOSES.get(name)
