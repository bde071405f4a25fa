"""SSH shell client with paramiko replaced by fakes."""

import socket
import time

import paramiko
import pytest

from netprobe.collectors.ssh_client import (
    COMPATIBLE_KEX,
    SshClient,
    apply_compatible_algorithms,
)
from netprobe.core.errors import CommandTimeoutError, ConnectionClosedError, TransportError


class FakeChannel:
    """Shell channel that answers each sent line with a canned chunk.

    A response given as a tuple of byte strings arrives as separate reads.
    """

    def __init__(self, banner, responses):
        self.chunks = [banner.encode()]
        self.responses = list(responses)
        self.sent = []

    def get_pty(self, width, height):
        pass

    def invoke_shell(self):
        pass

    def recv(self, size):
        return self.chunks.pop(0) if self.chunks else b""

    def sendall(self, data):
        self.sent.append(data.decode())
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, tuple):
                self.chunks.extend(response)
            else:
                self.chunks.append(response.encode())


class FakeTransport:
    def __init__(self, channel):
        self.channel = channel
        self.closed = False

    def open_session(self, timeout=None):
        return self.channel

    def close(self):
        self.closed = True


@pytest.fixture
def fake_transport(mocker):
    def install(channel):
        transport = FakeTransport(channel)

        def open_transport(self, username, password):
            self._transport = transport
            return transport

        mocker.patch.object(SshClient, "_open_transport", open_transport)
        return transport
    return install

# --- Algorithm selection ---

def test_legacy_key_exchanges_are_offered():
    left, right = socket.socketpair()
    transport = paramiko.Transport(left)
    try:
        apply_compatible_algorithms(transport)
        options = transport.get_security_options()
        assert "diffie-hellman-group14-sha1" in options.kex
        assert "diffie-hellman-group1-sha1" in options.kex
        assert list(options.kex) == [name for name in COMPATIBLE_KEX if name in transport._kex_info]
        assert "aes128-cbc" in options.ciphers
        assert "3des-cbc" in options.ciphers
    finally:
        transport.close()
        left.close()
        right.close()

# --- Connection setup ---

def test_close_during_connect_releases_socket(mocker):
    left, right = socket.socketpair()
    client = SshClient("192.0.2.1", timeout=5)
    real_transport = paramiko.Transport

    def transport_then_cancel(sock):
        transport = real_transport(sock)
        client._close()
        return transport

    mocker.patch("netprobe.collectors.ssh_client.socket.create_connection", return_value=left)
    mocker.patch("netprobe.collectors.ssh_client.paramiko.Transport", side_effect=transport_then_cancel)
    try:
        with pytest.raises(ConnectionClosedError):
            client._open_transport("admin", "pw")
        assert left.fileno() == -1
    finally:
        left.close()
        right.close()

# --- Shell exchange ---

async def test_runs_command_at_prompt(fake_transport):
    channel = FakeChannel(
        "MikroTik RouterOS\r\n[admin@bng] > ",
        [
            "/ppp active print\r\n 0 R name=alice address=10.0.0.9\r\n[admin@bng] > ",
            "",
        ],
    )
    transport = fake_transport(channel)

    output = await SshClient("192.0.2.1", timeout=5).run("admin", "pw", "/ppp active print")

    assert channel.sent == ["/ppp active print\n", "exit\n"]
    assert "name=alice address=10.0.0.9" in output
    assert transport.closed

async def test_character_split_across_reads_is_kept_intact(fake_transport):
    line = "display ont alarm\r\n1/1/3/116 LOS Atenuação alta\r\n<olt> ".encode()
    cut = line.index("ç".encode()) + 1
    channel = FakeChannel("<olt> ", [(line[:cut], line[cut:]), ""])
    fake_transport(channel)

    output = await SshClient("192.0.2.1", timeout=5).run("admin", "pw", "display ont alarm")

    assert "Atenuação alta" in output
    assert "\ufffd" not in output

async def test_channel_closed_before_command(fake_transport):
    fake_transport(FakeChannel("Welcome\r\n", []))
    with pytest.raises(ConnectionClosedError):
        await SshClient("192.0.2.1", timeout=5).run("admin", "pw", "show version")

async def test_hung_device_times_out(mocker):
    mocker.patch.object(SshClient, "_exchange", side_effect=lambda *args: time.sleep(0.5))
    with pytest.raises(CommandTimeoutError):
        await SshClient("192.0.2.1", timeout=0.05).run("admin", "pw", "show version")

async def test_ssh_failure_is_transport_error(mocker):
    mocker.patch.object(
        SshClient, "_exchange", side_effect=paramiko.AuthenticationException("Authentication failed.")
    )
    with pytest.raises(TransportError, match="Authentication failed"):
        await SshClient("192.0.2.1", timeout=5).run("admin", "bad", "show version")
