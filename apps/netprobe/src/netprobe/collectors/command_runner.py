"""Dispatches one CLI command to a device over SSH or Telnet."""

from ..core.errors import TransportError
from ..models.equipment import ConnectionType, EquipmentTarget
from .ssh_client import SshClient
from .telnet_client import TelnetClient


async def run_command(
    target: EquipmentTarget,
    command: str,
    timeout: float | None = None,
    password: str | None = None,
    connection_type: ConnectionType | None = None,
) -> str:
    """Run ``command`` on ``target`` and return the raw terminal output.

    ``password`` overrides the stored one (callers pass it decrypted) and
    ``connection_type`` overrides the record's transport. Raises
    ``TransportError`` on any connection failure or timeout.
    """
    if not target.address:
        raise TransportError(f"Equipment {target.name or target.id} has no address")

    connection_type = connection_type or target.connection_type
    username = target.username or ""
    password = password if password is not None else (target.password or "")
    port = target.terminal_port_for(connection_type)

    if connection_type == ConnectionType.TELNET:
        client = TelnetClient(target.address, port, timeout=timeout)
    else:
        client = SshClient(target.address, port, timeout=timeout)
    return await client.run(username, password, command)
