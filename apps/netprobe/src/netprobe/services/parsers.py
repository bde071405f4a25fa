"""Vendor CLI output parsers for PPPoE sessions and OLT alarms.

Parsers only extract what the device output actually shows. A missing
pattern is a normal outcome and yields ``None`` or an empty list.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

import netaddr

from ..models.alarm import OltAlarm
from ..models.equipment import Vendor
from ..models.session import PppoeSessionInfo

IPV4 = r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}"

IPV4_PATTERN = re.compile(rf"(?<![\d.])({IPV4})(?![\d.])")
MIKROTIK_ADDRESS_PATTERN = re.compile(rf"address=({IPV4})", re.IGNORECASE)
HUAWEI_IP_PATTERN = re.compile(rf"IP(?:\s+address)?[:\s]+({IPV4})", re.IGNORECASE)

# A Mikrotik print record starts with its item number: " 0 R name=..."
MIKROTIK_RECORD_START = re.compile(r"^\s*\d+\s", re.MULTILINE)

# "2025-12-15 05:43:59 UTC-3    CRITICAL gpon-1/1/1/14   Active   GPON_LOSi  ONU Loss of signal"
ALARM_LINE_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}\S*(?:\s+(?:UTC|GMT)[+\-]?\d{0,2}(?::\d{2})?)?)"
    r"\s+(\w+)"          # severity
    r"\s+([\w\-/:]+)"    # source
    r"\s+(\w+)"          # status
    r"\s+(\w+)"          # alarm name
    r"(?:\s+(.*))?"      # description
)

HUAWEI_SCAN_LINES = 10

ONU_ID_PREFIX = re.compile(r"^(gpon-olt_|gpon-|olt_)", re.IGNORECASE)


def _username_pattern(username: str) -> re.Pattern[str]:
    """Match ``username`` as a whole token, ignoring case."""
    return re.compile(rf"(?<![\w.@\-]){re.escape(username)}(?![\w.@\-])", re.IGNORECASE)


def _valid_ipv4(candidate: str) -> str | None:
    return candidate if netaddr.valid_ipv4(candidate) else None


def _session(username: str, ip_address: str | None) -> PppoeSessionInfo | None:
    if not ip_address:
        return None
    return PppoeSessionInfo(username=username, ip_address=ip_address)


def _mikrotik_records(output: str) -> list[str]:
    starts = [match.start() for match in MIKROTIK_RECORD_START.finditer(output)]
    if not starts:
        return [output]
    bounds = starts + [len(output)]
    return [output[bounds[i]:bounds[i + 1]] for i in range(len(starts))]


def parse_mikrotik_session(output: str, username: str) -> PppoeSessionInfo | None:
    """Find ``address=<ip>`` after the username within the same print record.

    Plain tabular ``print`` output has no ``address=`` token; there the row
    naming the user is read for its IPv4 column instead.
    """
    user = _username_pattern(username)
    for record in _mikrotik_records(output):
        user_match = user.search(record)
        if not user_match:
            continue
        address = MIKROTIK_ADDRESS_PATTERN.search(record, user_match.end())
        if address and _valid_ipv4(address.group(1)):
            return _session(username, address.group(1))

    for line in output.splitlines():
        if "address=" in line.lower() or not user.search(line):
            continue
        for candidate in IPV4_PATTERN.findall(line):
            if _valid_ipv4(candidate):
                return _session(username, candidate)
    return None


def parse_cisco_session(output: str, username: str) -> PppoeSessionInfo | None:
    """First line naming the user that also carries an IPv4 address."""
    user = _username_pattern(username)
    for line in output.splitlines():
        if not user.search(line):
            continue
        for candidate in IPV4_PATTERN.findall(line):
            if _valid_ipv4(candidate):
                return _session(username, candidate)
    return None


def parse_huawei_session(output: str, username: str) -> PppoeSessionInfo | None:
    """Look for ``IP: <ipv4>`` in the block that starts at the user's line."""
    user = _username_pattern(username)
    lines = output.splitlines()
    for i, line in enumerate(lines):
        if not user.search(line):
            continue
        for candidate_line in lines[i:i + HUAWEI_SCAN_LINES]:
            match = HUAWEI_IP_PATTERN.search(candidate_line)
            if match and _valid_ipv4(match.group(1)):
                return _session(username, match.group(1))
    return None


@dataclass(frozen=True)
class SessionListing:
    """CLI command that lists active sessions and the parser for its output."""
    command: str
    parse: Callable[[str, str], PppoeSessionInfo | None]


MIKROTIK_LISTING = SessionListing("/ppp active print", parse_mikrotik_session)

SESSION_LISTINGS: dict[Vendor, SessionListing] = {
    Vendor.MIKROTIK: MIKROTIK_LISTING,
    Vendor.CISCO: SessionListing("show subscriber session all", parse_cisco_session),
    Vendor.HUAWEI: SessionListing("display access-user", parse_huawei_session),
    Vendor.GENERIC: MIKROTIK_LISTING,
}


def get_session_listing(vendor: Vendor) -> SessionListing:
    return SESSION_LISTINGS.get(vendor, MIKROTIK_LISTING)


def normalize_onu_id(onu_id: str) -> str:
    """Reduce an ONU id to its slot/port/pon/onu numbers.

    ``gpon-olt_1/1/3:116``, ``gpon-1/1/3/116`` and ``1/1/3/116`` all
    normalize to ``1/1/3/116``.
    """
    normalized = ONU_ID_PREFIX.sub("", onu_id.strip())
    return normalized.replace(":", "/", 1)


def parse_alarm_line(line: str) -> OltAlarm | None:
    match = ALARM_LINE_PATTERN.search(line)
    if not match:
        return None
    timestamp, severity, source, status, name, description = (
        (group or "").strip() for group in match.groups()
    )
    return OltAlarm(
        timestamp=timestamp,
        severity=severity,
        source=source,
        status=status,
        name=name,
        description=description,
    )


def parse_alarms(output: str, onu_id: str | None = None) -> list[OltAlarm]:
    """Parse alarm lines, keeping only those raised on ``onu_id`` if given."""
    wanted = normalize_onu_id(onu_id) if onu_id else None
    alarms = []
    for line in output.splitlines():
        alarm = parse_alarm_line(line)
        if alarm is None:
            continue
        if wanted is not None and normalize_onu_id(alarm.source) != wanted:
            continue
        alarms.append(alarm)
    return alarms
