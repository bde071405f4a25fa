"""Command-line entry point for field troubleshooting.

Runs a PPPoE lookup or an OLT alarm diagnosis against one device and prints
the result as JSON on stdout. Logs go to stderr.
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from .core.logging import configure_logging
from .models.equipment import EquipmentTarget, SnmpProfile
from .services.olt import OltAlarmDiagnoser
from .services.pppoe import PppoeSessionResolver


def _add_device_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("address", help="Management IP address of the device.")
    parser.add_argument("--name", default="", help="Device name used in logs.")
    parser.add_argument("--vendor", default="mikrotik", help="mikrotik, cisco, huawei or generic.")
    parser.add_argument("--connection-type", default="ssh", choices=["ssh", "telnet"])
    parser.add_argument("--port", type=int, default=None, help="SSH/Telnet port.")
    parser.add_argument("--username", default=None, help="SSH/Telnet username.")
    parser.add_argument("--password", default=None, help="SSH/Telnet password.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netprobe",
        description="Query concentrators and OLTs over SNMP, SSH and Telnet.",
    )
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL, e.g. DEBUG.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parser_pppoe = subparsers.add_parser("pppoe", help="Resolve PPPoE usernames to IP addresses.")
    _add_device_arguments(parser_pppoe)
    parser_pppoe.add_argument("usernames", nargs="+", help="Subscriber usernames.")
    parser_pppoe.add_argument("--snmp-version", default="2c", help="1, 2c or 3.")
    parser_pppoe.add_argument("--snmp-port", type=int, default=None)
    parser_pppoe.add_argument("--community", default=None)
    parser_pppoe.add_argument("--snmp-user", default=None, help="SNMPv3 user name.")
    parser_pppoe.add_argument("--security-level", default=None, help="noAuthNoPriv, authNoPriv or authPriv.")
    parser_pppoe.add_argument("--auth-protocol", default=None, help="MD5 or SHA.")
    parser_pppoe.add_argument("--auth-password", default=None)
    parser_pppoe.add_argument("--priv-protocol", default=None, help="DES or AES.")
    parser_pppoe.add_argument("--priv-password", default=None)

    parser_alarm = subparsers.add_parser("alarm", help="Diagnose ONU alarms on an OLT.")
    _add_device_arguments(parser_alarm)
    parser_alarm.add_argument("onu_id", nargs="?", default=None, help="ONU id, e.g. gpon-olt_1/1/3:116.")
    parser_alarm.add_argument("--all", action="store_true", help="List every alarm on the OLT.")
    parser_alarm.add_argument("--test", action="store_true", help="Only test the connection.")

    return parser


def _equipment(args: argparse.Namespace) -> EquipmentTarget:
    return EquipmentTarget(
        name=args.name or args.address,
        address=args.address,
        vendor=args.vendor,
        connection_type=args.connection_type,
        port=args.port,
        username=args.username,
        password=args.password,
    )


def _snmp_profile(args: argparse.Namespace) -> SnmpProfile:
    fields: dict[str, Any] = {
        "version": args.snmp_version,
        "community": args.community,
        "username": args.snmp_user,
        "security_level": args.security_level,
        "auth_protocol": args.auth_protocol,
        "auth_password": args.auth_password,
        "priv_protocol": args.priv_protocol,
        "priv_password": args.priv_password,
    }
    if args.snmp_port:
        fields["port"] = args.snmp_port
    return SnmpProfile(**fields)


async def run_pppoe(args: argparse.Namespace) -> Any:
    sessions = await PppoeSessionResolver().resolve_sessions(
        _equipment(args), args.usernames, _snmp_profile(args)
    )
    return {username: info.model_dump(mode="json") for username, info in sessions.items()}


async def run_alarm(args: argparse.Namespace) -> Any:
    diagnoser = OltAlarmDiagnoser()
    olt = _equipment(args)
    if args.test:
        return (await diagnoser.test_connection(olt)).model_dump(mode="json")
    if args.all:
        return [alarm.model_dump(mode="json") for alarm in await diagnoser.query_all_alarms(olt)]
    return (await diagnoser.diagnose(olt, args.onu_id)).model_dump(mode="json")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "alarm" and not (args.onu_id or args.all or args.test):
        parser.error("alarm requires an ONU id, --all or --test")

    configure_logging(args.log_level)

    handler = run_pppoe if args.command == "pppoe" else run_alarm
    result = asyncio.run(handler(args))
    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0
