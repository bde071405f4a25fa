"""Protocol collectors: SNMP walks and single-command SSH/Telnet sessions."""

# Lazy imports keep pysnmp and paramiko off the import path of callers
# that only need the models or parsers
__all__ = ["SnmpSession", "SshClient", "TelnetClient", "run_command", "walk"]


def __getattr__(name: str):
    """Lazy load collectors to avoid import issues."""
    if name == "SnmpSession":
        from .snmp_session import SnmpSession
        return SnmpSession
    if name == "walk":
        from .snmp_walker import walk
        return walk
    if name == "SshClient":
        from .ssh_client import SshClient
        return SshClient
    if name == "TelnetClient":
        from .telnet_client import TelnetClient
        return TelnetClient
    if name == "run_command":
        from .command_runner import run_command
        return run_command
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
