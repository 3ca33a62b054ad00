"""A tiny HTTP server that answers every connection with a fixed page."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import Any

from carla.executor import block_on
from carla.net import TcpListener

DEFAULT_ADDRESS = "127.0.0.1:8080"

PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Title</title>
</head>
<body>
    Hello, world!
</body>
</html>"""


def build_response(content: str) -> str:
    """Return a complete HTTP/1.1 200 response carrying ``content`` as HTML."""
    length = len(content.encode("utf-8"))
    return (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: text/html\r\n"
        f"Content-Length: {length}\r\n"
        "\r\n"
        f"{content}"
    )


def _format_peer(peer: Any) -> str:
    if isinstance(peer, tuple) and len(peer) >= 2:
        host, port = peer[0], peer[1]
        return f"[{host}]:{port}" if ":" in str(host) else f"{host}:{port}"
    return str(peer)


async def serve(addr: str | TcpListener) -> None:
    """Serve the page on ``addr`` (a ``host:port`` string or a bound listener).

    Stops when accepting a connection fails. A listener passed in is left
    for the caller to close.
    """
    owned = isinstance(addr, str)
    listener = TcpListener.bind(addr) if isinstance(addr, str) else addr
    try:
        while True:
            try:
                client, peer = await listener.accept()
            except OSError:
                break
            with client:
                print(f"{_format_peer(peer)} connected")
                request = await client.read(1024)
                print(f"{len(request)} bytes read")
                print(request.decode("utf-8", errors="replace"))

                response = build_response(PAGE)
                print(response)
                try:
                    written = await client.write(response.encode("utf-8"))
                except OSError:
                    continue
                print(f"{written} bytes written")
    finally:
        if owned:
            listener.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point: serve until accepting fails."""
    parser = argparse.ArgumentParser(prog="simple_http", description="Serve a fixed HTML page.")
    parser.add_argument("address", nargs="?", default=DEFAULT_ADDRESS, help="host:port to listen on")
    args = parser.parse_args(argv)
    try:
        block_on(serve(args.address))
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())