"""Non-blocking TCP listener and client driven by the reactor."""

from __future__ import annotations

import errno
import socket
from collections.abc import Generator
from typing import Any

from carla.executor import current_waker
from carla.reactor import Reactor, get_reactor


class _Ready:
    """Suspend the current task until ``sock`` is readable or writable."""

    def __init__(self, reactor: Reactor, sock: socket.socket, writable: bool) -> None:
        self._reactor = reactor
        self._sock = sock
        self._writable = writable

    def __await__(self) -> Generator[None, None, None]:
        task_waker = current_waker()
        if self._writable:
            self._reactor.wake_on_writable(self._sock, task_waker)
        else:
            self._reactor.wake_on_readable(self._sock, task_waker)
        yield


def _parse_addr(addr: str) -> tuple[str, int]:
    host, sep, port_text = addr.rpartition(":")
    if not sep or not host:
        raise ValueError(f"invalid socket address: {addr!r}")
    host = host.removeprefix("[").removesuffix("]")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port in socket address: {addr!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range in socket address: {addr!r}")
    return host, port


def _closed_error(what: str) -> OSError:
    return OSError(errno.EBADF, f"{what} is closed")


class TcpClient:
    """A connected stream whose reads and writes suspend instead of blocking."""

    def __init__(self, stream: socket.socket) -> None:
        stream.setblocking(False)
        self._reactor = get_reactor()
        self._reactor.add(stream)
        self._sock = stream
        self._registered = True

    @property
    def closed(self) -> bool:
        return self._sock.fileno() == -1

    async def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; an empty result means end of stream."""
        if self.closed:
            raise _closed_error("client")
        while True:
            try:
                return self._sock.recv(size)
            except BlockingIOError:
                await _Ready(self._reactor, self._sock, writable=False)

    async def write(self, data: bytes) -> int:
        """Write some of ``data`` and return how many bytes were sent."""
        if self.closed:
            raise _closed_error("client")
        while True:
            try:
                return self._sock.send(data)
            except BlockingIOError:
                await _Ready(self._reactor, self._sock, writable=True)

    def flush(self) -> None:
        """Nothing is buffered on this side; only checks the stream is open."""
        if self.closed:
            raise _closed_error("client")

    def close(self) -> None:
        """Stop watching the stream and close it. Safe to call twice."""
        if self._registered:
            self._reactor.remove(self._sock)
            self._registered = False
        self._sock.close()

    def __enter__(self) -> TcpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_registered", False):
            self.close()


class TcpListener:
    """A listening socket whose ``accept`` suspends until a peer connects."""

    def __init__(self, sock: socket.socket) -> None:
        sock.setblocking(False)
        self._reactor = get_reactor()
        self._sock = sock
        self._registered = False

    @classmethod
    def bind(cls, addr: str) -> TcpListener:
        """Listen on ``addr`` given as ``host:port`` (``[host]:port`` for IPv6)."""
        host, port = _parse_addr(addr)
        last_error: OSError | None = None
        for family, _type, _proto, _name, sockaddr in socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM
        ):
            try:
                return cls(socket.create_server(sockaddr, family=family))
            except OSError as exc:
                last_error = exc
        if last_error is None:
            raise OSError(f"could not resolve {addr!r}")
        raise last_error

    @property
    def local_addr(self) -> Any:
        return self._sock.getsockname()

    @property
    def closed(self) -> bool:
        return self._sock.fileno() == -1

    async def accept(self) -> tuple[TcpClient, Any]:
        """Wait for a connection; return the client and the peer's address."""
        if self.closed:
            raise _closed_error("listener")
        self._reactor.add(self._sock)
        self._registered = True
        try:
            while True:
                try:
                    stream, peer = self._sock.accept()
                except BlockingIOError:
                    await _Ready(self._reactor, self._sock, writable=False)
                else:
                    return TcpClient(stream), peer
        finally:
            if self._registered:
                self._reactor.remove(self._sock)
                self._registered = False

    def close(self) -> None:
        """Close the listener; a pending ``accept`` is never woken."""
        if self._registered:
            self._reactor.remove(self._sock)
            self._registered = False
        self._sock.close()

    def __enter__(self) -> TcpListener:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_registered", False):
            self.close()