"""OLT alarm queries and ONU root-cause diagnosis."""

from collections.abc import Awaitable, Callable, Sequence

from ..collectors.command_runner import run_command
from ..core.errors import capture
from ..core.logging import get_logger
from ..models.alarm import ConnectionCheck, OltAlarm, OltDiagnosis
from ..models.equipment import EquipmentTarget
from .alarm_catalog import (
    NO_ACTIVE_ALARMS,
    NO_ALARMS_DESCRIPTION,
    QUERY_ERROR,
    UNKNOWN_ALARM,
    lookup_alarm,
)
from .crypto import CredentialCipher, get_credential_cipher
from .parsers import normalize_onu_id, parse_alarms

logger = get_logger(__name__)

SHOW_ALARM = "show alarm"
CONNECTION_OK = "Connection successful"

CommandRunner = Callable[..., Awaitable[str]]


def alarm_command(onu_id: str) -> str:
    return f"{SHOW_ALARM} | include {normalize_onu_id(onu_id)}"


def classify(alarms: Sequence[OltAlarm], raw_output: str = "") -> OltDiagnosis:
    """Pick the alarm that explains the ONU state and map it to a diagnosis.

    The first Active alarm wins, otherwise the first alarm listed. Unknown
    alarm names keep the description the device printed.
    """
    if not alarms:
        return OltDiagnosis(
            description=NO_ALARMS_DESCRIPTION,
            diagnosis=NO_ACTIVE_ALARMS,
            raw_output=raw_output,
        )

    chosen = next((alarm for alarm in alarms if alarm.is_active), alarms[0])
    known = lookup_alarm(chosen.name)
    return OltDiagnosis(
        alarm_type=chosen.name,
        alarm_code=chosen.source,
        description=known.description if known else chosen.description,
        diagnosis=known.diagnosis if known else UNKNOWN_ALARM,
        raw_output=raw_output,
    )


def diagnosis_from_alarms(alarms: Sequence[OltAlarm], onu_id: str) -> OltDiagnosis:
    """Diagnose one ONU from an alarm list already fetched for its OLT."""
    wanted = normalize_onu_id(onu_id)
    matching = [alarm for alarm in alarms if normalize_onu_id(alarm.source) == wanted]
    return classify(matching)


class OltAlarmDiagnoser:
    """Runs alarm commands on an OLT over its configured terminal transport."""

    def __init__(
        self,
        command_runner: CommandRunner = run_command,
        cipher: CredentialCipher | None = None,
    ) -> None:
        self._command_runner = command_runner
        self.cipher = cipher or get_credential_cipher()

    async def _run(self, olt: EquipmentTarget, command: str) -> str:
        password = self.cipher.decrypt(olt.password)
        return await self._command_runner(olt, command, password=password)

    async def diagnose(self, olt: EquipmentTarget, onu_id: str) -> OltDiagnosis:
        """Suggest a root cause for ``onu_id``. Never raises.

        Failures come back as a "Query Error" diagnosis whose description
        carries the error message.
        """
        command = alarm_command(onu_id)
        logger.info(
            "olt_alarm_query",
            olt=olt.name,
            onu_id=onu_id,
            connection_type=olt.connection_type.value,
        )

        outcome = await capture(self._run(olt, command), event="olt_alarm_query_failed", olt=olt.name)
        if not outcome.ok:
            return OltDiagnosis(
                description=f"Failed to query OLT: {outcome.error}",
                diagnosis=QUERY_ERROR,
            )

        raw_output = outcome.value or ""
        alarms = parse_alarms(raw_output, onu_id)
        diagnosis = classify(alarms, raw_output)
        logger.info(
            "olt_alarm_diagnosed",
            olt=olt.name,
            onu_id=onu_id,
            alarms=len(alarms),
            alarm_type=diagnosis.alarm_type,
            diagnosis=diagnosis.diagnosis,
        )
        return diagnosis

    async def query_all_alarms(self, olt: EquipmentTarget) -> list[OltAlarm]:
        """Every alarm line the OLT reports, for bulk diagnosis."""
        outcome = await capture(self._run(olt, SHOW_ALARM), event="olt_alarm_list_failed", olt=olt.name)
        if not outcome.ok:
            return []
        alarms = parse_alarms(outcome.value or "")
        logger.info("olt_alarm_list", olt=olt.name, alarms=len(alarms))
        return alarms

    async def test_connection(self, olt: EquipmentTarget) -> ConnectionCheck:
        outcome = await capture(self._run(olt, SHOW_ALARM), event="olt_connection_test_failed", olt=olt.name)
        if not outcome.ok:
            return ConnectionCheck(success=False, message=str(outcome.error) or type(outcome.error).__name__)
        return ConnectionCheck(success=True, message=CONNECTION_OK)


async def diagnose(olt: EquipmentTarget, onu_id: str) -> OltDiagnosis:
    """Diagnose one ONU with the default transports."""
    return await OltAlarmDiagnoser().diagnose(olt, onu_id)


async def query_all_alarms(olt: EquipmentTarget) -> list[OltAlarm]:
    return await OltAlarmDiagnoser().query_all_alarms(olt)


async def test_connection(olt: EquipmentTarget) -> ConnectionCheck:
    return await OltAlarmDiagnoser().test_connection(olt)
