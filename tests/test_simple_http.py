import socket

from carla.executor import block_on, spawn
from carla.net import TcpClient, TcpListener
from carla.simple_http import PAGE, build_response, main, serve


def _split(response):
    head, _, body = response.partition("\r\n\r\n")
    lines = head.split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body


def test_response_layout():
    status, headers, body = _split(build_response("abc"))
    assert status == "HTTP/1.1 200 OK"
    assert headers["Content-Type"] == "text/html"
    assert body == "abc"


def test_content_length_counts_bytes():
    content = "h\u00e9llo"
    _, headers, body = _split(build_response(content))
    assert int(headers["Content-Length"]) == len(content.encode("utf-8"))
    assert body == content


def test_page_response_length_matches_page():
    _, headers, body = _split(build_response(PAGE))
    assert body == PAGE
    assert int(headers["Content-Length"]) == len(PAGE.encode("utf-8"))


def test_serve_answers_a_request(capsys):
    listener = TcpListener.bind("127.0.0.1:0")
    host, port = listener.local_addr[:2]
    request = b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"

    async def client_side():
        spawn(serve(listener))
        sock = socket.create_connection((host, port))
        with TcpClient(sock) as client:
            await client.write(request)
            chunks = []
            while chunk := await client.read(4096):
                chunks.append(chunk)
        listener.close()
        return b"".join(chunks)

    received = block_on(client_side())
    expected = build_response(PAGE).encode("utf-8")
    assert received == expected
    out = capsys.readouterr().out
    assert f"{len(request)} bytes read" in out
    assert f"{len(expected)} bytes written" in out
    assert "connected" in out


def test_main_reports_bad_address(capsys):
    assert main(["not-an-address"]) == 1
    assert "error" in capsys.readouterr().err