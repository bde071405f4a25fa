"""Single-command Telnet client over a raw asyncio stream."""

import asyncio

from ..core.config import settings
from ..core.errors import CommandTimeoutError, ConnectionClosedError, TransportError
from ..core.logging import get_logger
from .terminal import TelnetNegotiator, TerminalSession

logger = get_logger(__name__)


class TelnetClient:
    """Logs in, runs one command and returns everything the device printed.

    One timeout covers connect, login and the command. The socket is closed
    once on every exit path, and aborted rather than closed gracefully when
    the exchange failed.
    """

    def __init__(
        self,
        host: str,
        port: int | None = None,
        timeout: float | None = None,
        read_size: int | None = None,
    ) -> None:
        self.host = host
        self.port = port or settings.telnet_port
        self.timeout = settings.telnet_timeout if timeout is None else timeout
        self.read_size = read_size or settings.terminal_read_size
        self._writer: asyncio.StreamWriter | None = None

    async def run(self, username: str, password: str, command: str) -> str:
        session = TerminalSession(command, username=username, password=password)
        failed = True
        try:
            await asyncio.wait_for(self._converse(session), timeout=self.timeout)
            failed = False
        except asyncio.TimeoutError as e:
            raise CommandTimeoutError(
                f"Telnet connection timeout after {self.timeout}s (phase {session.phase.name})",
                host=self.host,
            ) from e
        except OSError as e:
            raise TransportError(
                f"Telnet connection to {self.host}:{self.port} failed: {e}", host=self.host
            ) from e
        finally:
            self._close(abort=failed)

        logger.debug(
            "telnet_command_completed",
            host=self.host,
            command=command,
            output_length=len(session.output),
        )
        return session.output

    async def _converse(self, session: TerminalSession) -> None:
        reader, self._writer = await asyncio.open_connection(self.host, self.port)
        logger.debug("telnet_connected", host=self.host, port=self.port)
        negotiator = TelnetNegotiator()

        while not session.completed:
            data = await reader.read(self.read_size)
            if not data:
                if session.command_sent:
                    # Device hung up after running the command; keep what it printed
                    return
                raise ConnectionClosedError(
                    "Connection closed before command completion", host=self.host
                )

            payload, replies = negotiator.feed(data)
            if replies:
                self._writer.write(replies)
            reply = session.feed_bytes(payload)
            if reply is not None:
                self._writer.write(reply.encode("utf-8"))
            await self._writer.drain()

    def _close(self, abort: bool) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        if abort:
            writer.transport.abort()
        else:
            writer.close()
