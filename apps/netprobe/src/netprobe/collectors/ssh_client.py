"""Single-command SSH shell client built on paramiko.

Access concentrators and OLTs in the field often run firmware that only
speaks old key exchanges (diffie-hellman-group1/group14-sha1) and CBC
ciphers. The transport therefore offers those alongside the modern ones.
This keeps old gear reachable; it is a compatibility trade-off and not a
recommended security posture, so operators should upgrade such devices.
"""

import asyncio
import socket

import paramiko

from ..core.config import settings
from ..core.errors import CommandTimeoutError, ConnectionClosedError, TransportError
from ..core.logging import get_logger
from .terminal import TerminalSession

logger = get_logger(__name__)

COMPATIBLE_KEX = (
    "curve25519-sha256@libssh.org",
    "curve25519-sha256",
    "ecdh-sha2-nistp256",
    "ecdh-sha2-nistp384",
    "ecdh-sha2-nistp521",
    "diffie-hellman-group-exchange-sha256",
    "diffie-hellman-group14-sha256",
    "diffie-hellman-group14-sha1",
    "diffie-hellman-group1-sha1",
)

COMPATIBLE_CIPHERS = (
    "aes128-ctr",
    "aes192-ctr",
    "aes256-ctr",
    "aes128-gcm@openssh.com",
    "aes256-gcm@openssh.com",
    "aes256-cbc",
    "aes192-cbc",
    "aes128-cbc",
    "3des-cbc",
)


def apply_compatible_algorithms(transport: paramiko.Transport) -> None:
    """Offer our algorithm lists in order, limited to what paramiko implements.

    The filter runs against everything paramiko supports, not its default
    preference list, which leaves out the SHA-1 Diffie-Hellman groups.
    """
    options = transport.get_security_options()
    kex = [name for name in COMPATIBLE_KEX if name in transport._kex_info]
    if kex:
        options.kex = kex
    ciphers = [name for name in COMPATIBLE_CIPHERS if name in transport._cipher_info]
    if ciphers:
        options.ciphers = ciphers


class SshClient:
    """Opens a shell, runs one command once the prompt shows, then exits.

    paramiko is blocking, so the exchange runs in a worker thread. The
    coroutine is bounded by ``timeout``; on expiry the transport is closed,
    which also unblocks the worker.
    """

    def __init__(
        self,
        host: str,
        port: int | None = None,
        timeout: float | None = None,
        login_timeout: float | None = None,
        read_size: int | None = None,
    ) -> None:
        self.host = host
        self.port = port or settings.ssh_port
        self.timeout = settings.ssh_command_timeout if timeout is None else timeout
        self.login_timeout = settings.ssh_login_timeout if login_timeout is None else login_timeout
        self.read_size = read_size or settings.terminal_read_size
        self._sock: socket.socket | None = None
        self._transport: paramiko.Transport | None = None
        self._closed = False

    async def run(self, username: str, password: str, command: str) -> str:
        session = TerminalSession.for_shell(command)
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._exchange, username, password, session),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise CommandTimeoutError(
                f"SSH connection timeout after {self.timeout}s", host=self.host
            ) from e
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise TransportError(
                f"SSH connection to {self.host}:{self.port} failed: {e}", host=self.host
            ) from e
        finally:
            self._close()

        logger.debug(
            "ssh_command_completed",
            host=self.host,
            command=command,
            output_length=len(session.output),
        )
        return session.output

    def _open_transport(self, username: str, password: str) -> paramiko.Transport:
        self._sock = socket.create_connection((self.host, self.port), timeout=self.login_timeout)
        transport = paramiko.Transport(self._sock)
        self._transport = transport
        # _close() may have run on timeout while this thread was connecting
        if self._closed:
            self._release()
            raise ConnectionClosedError("SSH session cancelled", host=self.host)

        apply_compatible_algorithms(transport)
        transport.start_client(timeout=self.login_timeout)
        try:
            transport.auth_password(username, password)
        except paramiko.BadAuthenticationType as e:
            if "keyboard-interactive" not in e.allowed_types:
                raise
            # Some BRAS firmware only offers keyboard-interactive
            transport.auth_interactive(
                username, lambda title, instructions, prompts: [password for _ in prompts]
            )
        return transport

    def _exchange(self, username: str, password: str, session: TerminalSession) -> None:
        transport = self._open_transport(username, password)
        channel = transport.open_session(timeout=self.login_timeout)
        channel.get_pty(width=200, height=1000)
        channel.invoke_shell()

        while not session.completed:
            data = channel.recv(self.read_size)
            if not data:
                if session.command_sent:
                    return
                raise ConnectionClosedError(
                    "SSH channel closed before command completion", host=self.host
                )
            reply = session.feed_bytes(data)
            if reply is not None:
                channel.sendall(reply.encode("utf-8"))

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> None:
        if self._transport is not None:
            self._transport.close()
        if self._sock is not None:
            self._sock.close()
