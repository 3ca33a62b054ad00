import socket

import pytest

from carla.executor import block_on, spawn
from carla.net import TcpClient, TcpListener
from carla.reactor import get_reactor


def test_bind_assigns_port():
    with TcpListener.bind("127.0.0.1:0") as listener:
        host, port = listener.local_addr[:2]
        assert host == "127.0.0.1"
        assert port > 0
    assert listener.closed


@pytest.mark.parametrize("addr", ["nonsense", ":80", "127.0.0.1:http", "127.0.0.1:70000"])
def test_bind_rejects_bad_address(addr):
    with pytest.raises(ValueError):
        TcpListener.bind(addr)


def test_bind_port_in_use():
    with TcpListener.bind("127.0.0.1:0") as listener:
        port = listener.local_addr[1]
        with pytest.raises(OSError):
            TcpListener.bind(f"127.0.0.1:{port}")


def test_echo_roundtrip():
    listener = TcpListener.bind("127.0.0.1:0")
    host, port = listener.local_addr[:2]
    peers = []

    async def server():
        client, peer = await listener.accept()
        peers.append(peer)
        with client:
            data = await client.read(1024)
            await client.write(data)

    async def client_side():
        spawn(server())
        sock = socket.create_connection((host, port))
        with TcpClient(sock) as client:
            await client.write(b"hello")
            client.flush()
            chunks = []
            while chunk := await client.read(1024):
                chunks.append(chunk)
            return b"".join(chunks), sock.getsockname()

    with listener:
        echoed, local = block_on(client_side())
    assert echoed == b"hello"
    assert peers == [local]
    assert not get_reactor().waiting_on_events()


def test_read_waits_for_data():
    a, b = socket.socketpair()
    reader_side = TcpClient(a)
    writer_side = TcpClient(b)

    async def writer():
        await writer_side.write(b"payload")

    async def reader():
        spawn(writer())
        return await reader_side.read(64)

    try:
        assert block_on(reader()) == b"payload"
    finally:
        reader_side.close()
        writer_side.close()


def test_read_reports_end_of_stream():
    a, b = socket.socketpair()
    client = TcpClient(a)
    b.sendall(b"hi")
    b.close()

    async def read_twice():
        return await client.read(16), await client.read(16)

    with client:
        assert block_on(read_twice()) == (b"hi", b"")


def test_write_returns_count_sent():
    a, b = socket.socketpair()
    data = b"some bytes"
    with TcpClient(a) as client:
        sent = block_on(client.write(data))
        assert 0 < sent <= len(data)
        assert b.recv(64) == data[:sent]
    b.close()


def test_close_is_idempotent_and_flush_fails_after():
    a, b = socket.socketpair()
    client = TcpClient(a)
    client.close()
    client.close()
    assert client.closed
    with pytest.raises(OSError):
        client.flush()
    b.close()


def test_read_after_close_fails():
    a, b = socket.socketpair()
    client = TcpClient(a)
    client.close()
    b.close()
    with pytest.raises(OSError):
        block_on(client.read(8))


def test_accept_on_closed_listener_fails():
    listener = TcpListener.bind("127.0.0.1:0")
    listener.close()
    with pytest.raises(OSError):
        block_on(listener.accept())