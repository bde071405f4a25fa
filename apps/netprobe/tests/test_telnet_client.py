"""Telnet client against a local scripted device."""

import asyncio

import pytest

from netprobe.collectors.telnet_client import TelnetClient
from netprobe.collectors.terminal import DO, IAC, WONT
from netprobe.core.errors import CommandTimeoutError, TransportError


async def start_device(handler):
    server = await asyncio.start_server(handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    return server, port


async def test_runs_command_after_login():
    received = []

    async def device(reader, writer):
        writer.write(bytes([IAC, DO, 24]) + b"Username: ")
        received.append(await reader.readuntil(b"\r\n"))
        writer.write(b"Password: ")
        received.append(await reader.readuntil(b"\r\n"))
        writer.write(b"\r\nOLT-1#")
        command = await reader.readuntil(b"\r\n")
        received.append(command)
        writer.write(command + b"2025-12-15 05:43:59 CRITICAL gpon-1/1/3/116 Active GPON_LOSi x\r\nOLT-1#")
        received.append(await reader.readuntil(b"\r\n"))
        writer.close()

    server, port = await start_device(device)
    try:
        client = TelnetClient("127.0.0.1", port, timeout=5)
        output = await client.run("zte", "secret", "show alarm | include 1/1/3/116")
    finally:
        server.close()

    assert received == [
        bytes([IAC, WONT, 24]) + b"zte\r\n",
        b"secret\r\n",
        b"show alarm | include 1/1/3/116\r\n",
        b"exit\r\n",
    ]
    assert "GPON_LOSi" in output
    assert "\xff" not in output


async def test_silent_device_times_out():
    async def device(reader, writer):
        await reader.read()

    server, port = await start_device(device)
    try:
        client = TelnetClient("127.0.0.1", port, timeout=0.2)
        with pytest.raises(CommandTimeoutError, match="AWAIT_LOGIN"):
            await client.run("zte", "secret", "show alarm")
    finally:
        server.close()


async def test_close_before_command_is_an_error():
    async def device(reader, writer):
        writer.write(b"Username: ")
        await writer.drain()
        writer.close()

    server, port = await start_device(device)
    try:
        client = TelnetClient("127.0.0.1", port, timeout=5)
        with pytest.raises(TransportError):
            await client.run("zte", "secret", "show alarm")
    finally:
        server.close()


async def test_close_after_command_returns_output():
    async def device(reader, writer):
        writer.write(b"Username: ")
        await reader.readuntil(b"\r\n")
        writer.write(b"Password: ")
        await reader.readuntil(b"\r\n")
        writer.write(b"OLT>")
        await reader.readuntil(b"\r\n")
        writer.write(b"no alarms\r\n")
        await writer.drain()
        writer.close()

    server, port = await start_device(device)
    try:
        client = TelnetClient("127.0.0.1", port, timeout=5)
        output = await client.run("zte", "secret", "show alarm")
    finally:
        server.close()

    assert output.endswith("no alarms\r\n")


async def test_refused_connection_is_transport_error():
    server, port = await start_device(lambda reader, writer: None)
    server.close()
    await server.wait_closed()

    client = TelnetClient("127.0.0.1", port, timeout=5)
    with pytest.raises(TransportError):
        await client.run("zte", "secret", "show alarm")


async def test_character_split_across_writes_is_kept_intact():
    text = "2025-12-15 05:43:59 MAJOR gpon-1/1/3/116 Active GPON_SUFi Atenuação alta\r\nOLT#".encode()
    split = text.index("ç".encode()) + 1

    async def device(reader, writer):
        writer.write(b"Username: ")
        await reader.readuntil(b"\r\n")
        writer.write(b"Password: ")
        await reader.readuntil(b"\r\n")
        writer.write(b"OLT#")
        await reader.readuntil(b"\r\n")
        writer.write(text[:split])
        await writer.drain()
        await asyncio.sleep(0.05)
        writer.write(text[split:])
        await reader.readuntil(b"\r\n")
        writer.close()

    server, port = await start_device(device)
    try:
        output = await TelnetClient("127.0.0.1", port, timeout=5).run("zte", "secret", "show alarm")
    finally:
        server.close()

    assert "Atenuação alta" in output
    assert "\ufffd" not in output
