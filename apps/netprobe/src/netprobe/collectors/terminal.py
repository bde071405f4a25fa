"""Prompt-driven dialog for a single scripted command on a device CLI.

``TerminalSession`` is a pure state machine: it is fed text or raw bytes as they
arrive and answers with the text to send back, if any. The SSH and Telnet
clients only move bytes; login and prompt handling live here so they can be
exercised with canned chunks.
"""

import codecs
import re
from enum import IntEnum

PROMPT_CHARS = ("#", ">")
LOGIN_PROMPT = re.compile(r"(?:user\s*name|login)\s*:", re.IGNORECASE)
PASSWORD_PROMPT = re.compile(r"password\s*:", re.IGNORECASE)

# Telnet protocol bytes (RFC 854)
IAC = 255
DONT = 254
DO = 253
WONT = 252
WILL = 251
SB = 250
SE = 240


class TerminalPhase(IntEnum):
    """Where a session stands in the login and command exchange."""
    AWAIT_LOGIN = 0
    AWAIT_PASSWORD = 1
    AWAIT_SHELL = 2
    AWAIT_COMPLETION = 3
    DONE = 4


def has_prompt(text: str) -> bool:
    return any(char in text for char in PROMPT_CHARS)


class TerminalSession:
    """Output buffer and phase marker for one command exchange.

    Telnet sessions start at ``AWAIT_LOGIN`` and walk all four phases. SSH
    has already authenticated when the shell opens, so SSH sessions start
    at ``AWAIT_SHELL``.
    """

    def __init__(
        self,
        command: str,
        username: str | None = None,
        password: str | None = None,
        phase: TerminalPhase = TerminalPhase.AWAIT_LOGIN,
        newline: str = "\r\n",
    ) -> None:
        self.command = command
        self.username = username or ""
        self.password = password or ""
        self.phase = phase
        self.newline = newline
        self.output = ""
        # Text received since the last phase change
        self._pending = ""
        # A multi-byte character may be split across two reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._handlers = {
            TerminalPhase.AWAIT_LOGIN: self._await_login,
            TerminalPhase.AWAIT_PASSWORD: self._await_password,
            TerminalPhase.AWAIT_SHELL: self._await_shell,
            TerminalPhase.AWAIT_COMPLETION: self._await_completion,
        }

    @classmethod
    def for_shell(cls, command: str, newline: str = "\n") -> "TerminalSession":
        """Session for an already authenticated shell channel."""
        return cls(command, phase=TerminalPhase.AWAIT_SHELL, newline=newline)

    @property
    def completed(self) -> bool:
        return self.phase == TerminalPhase.DONE

    @property
    def command_sent(self) -> bool:
        return self.phase >= TerminalPhase.AWAIT_COMPLETION

    def feed_bytes(self, data: bytes) -> str | None:
        """Decode ``data`` as UTF-8 across reads and feed the text."""
        return self.feed(self._decoder.decode(data))

    def feed(self, chunk: str) -> str | None:
        """Record ``chunk`` and return the text to send in reply, if any."""
        self.output += chunk
        if self.completed:
            return None
        self._pending += chunk
        return self._handlers[self.phase]()

    def _advance(self, phase: TerminalPhase, reply: str) -> str:
        self.phase = phase
        self._pending = ""
        return reply + self.newline

    def _await_login(self) -> str | None:
        if LOGIN_PROMPT.search(self._pending):
            return self._advance(TerminalPhase.AWAIT_PASSWORD, self.username)
        return None

    def _await_password(self) -> str | None:
        if PASSWORD_PROMPT.search(self._pending):
            return self._advance(TerminalPhase.AWAIT_SHELL, self.password)
        return None

    def _await_shell(self) -> str | None:
        if has_prompt(self._pending):
            return self._advance(TerminalPhase.AWAIT_COMPLETION, self.command)
        return None

    def _await_completion(self) -> str | None:
        # The device echoes the command back before running it
        received = self._pending.replace(self.command, "", 1)
        if has_prompt(received):
            return self._advance(TerminalPhase.DONE, "exit")
        return None


class TelnetNegotiator:
    """Strips Telnet commands from the stream and refuses every option.

    The client never starts a negotiation; ``DO`` is answered with ``WONT``
    and ``WILL`` with ``DONT``. Sequences split across reads are held back
    until complete.
    """

    def __init__(self) -> None:
        self._pending = b""

    def feed(self, data: bytes) -> tuple[bytes, bytes]:
        """Return (payload bytes, reply bytes) for a chunk read off the socket."""
        data = self._pending + data
        self._pending = b""
        payload = bytearray()
        replies = bytearray()
        i = 0
        while i < len(data):
            byte = data[i]
            if byte != IAC:
                payload.append(byte)
                i += 1
                continue
            if i + 1 >= len(data):
                self._pending = data[i:]
                break
            command = data[i + 1]
            if command == IAC:
                payload.append(IAC)
                i += 2
            elif command in (DO, DONT, WILL, WONT):
                if i + 2 >= len(data):
                    self._pending = data[i:]
                    break
                option = data[i + 2]
                if command == DO:
                    replies += bytes([IAC, WONT, option])
                elif command == WILL:
                    replies += bytes([IAC, DONT, option])
                i += 3
            elif command == SB:
                end = data.find(bytes([IAC, SE]), i + 2)
                if end == -1:
                    self._pending = data[i:]
                    break
                i = end + 2
            else:
                i += 2
        return bytes(payload), bytes(replies)
