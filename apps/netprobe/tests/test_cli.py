import json

import pytest

from netprobe import cli
from netprobe.models.alarm import OltDiagnosis
from netprobe.models.session import PppoeSessionInfo


@pytest.fixture(autouse=True)
def no_logging_setup(mocker):
    """Keep structlog unconfigured so it does not bind to a captured stream."""
    mocker.patch.object(cli, "configure_logging")


def test_pppoe_prints_sessions_as_json(mocker, capsys):
    resolver = mocker.patch.object(cli, "PppoeSessionResolver")
    resolver.return_value.resolve_sessions = mocker.AsyncMock(
        return_value={"alice": PppoeSessionInfo(username="alice", ip_address="10.0.0.9")}
    )

    assert cli.main(["pppoe", "10.10.0.1", "alice", "bob", "--community", "n0c-ro"]) == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed["alice"]["ip_address"] == "10.0.0.9"
    equipment, usernames, profile = resolver.return_value.resolve_sessions.await_args.args
    assert equipment.address == "10.10.0.1"
    assert usernames == ["alice", "bob"]
    assert profile.community == "n0c-ro"

def test_alarm_prints_diagnosis(mocker, capsys):
    diagnoser = mocker.patch.object(cli, "OltAlarmDiagnoser")
    diagnoser.return_value.diagnose = mocker.AsyncMock(
        return_value=OltDiagnosis(description="d", diagnosis="Fiber break", alarm_type="GPON_LOSi")
    )

    cli.main(["alarm", "10.20.0.1", "gpon-olt_1/1/3:116", "--connection-type", "telnet"])

    printed = json.loads(capsys.readouterr().out)
    assert printed["diagnosis"] == "Fiber break"
    olt, onu_id = diagnoser.return_value.diagnose.await_args.args
    assert olt.connection_type.value == "telnet"
    assert onu_id == "gpon-olt_1/1/3:116"

def test_alarm_requires_onu_or_mode():
    with pytest.raises(SystemExit):
        cli.main(["alarm", "10.20.0.1"])
