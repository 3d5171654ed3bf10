import io
import socket
import threading

import pytest

from syslabs.protocol import build_request
from syslabs.socket_client import DomainSocketClient
from syslabs.socket_server import DomainSocketServer, main

ROWS = "apple,red\nbanana,yellow\ncherry,red\n"


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "fruit.csv"
    path.write_text(ROWS)
    return path


def _exchange(server, request):
    left, right = socket.socketpair()
    with left, right:
        left.sendall(request.encode())
        sent = server.serve_client(right)
        right.close()
        response = b""
        while chunk := left.recv(1024):
            response += chunk
    return sent, response


def _records(response):
    assert response.endswith(b"\x03")
    return [r.decode() for r in response[:-1].split(b"\x1f")[:-1]]


def test_single_term_response_bytes(csv_path):
    server = DomainSocketServer("unused", write_delay=0)
    sent, response = _exchange(server, build_request(str(csv_path), ["cherry"]))
    assert response == b"cherry,red\x1f\x03"
    assert sent == len(response)


def test_or_returns_lines_in_file_order(csv_path):
    server = DomainSocketServer("unused", write_delay=0)
    request = build_request(str(csv_path), ["red", "+", "yellow"])
    _, response = _exchange(server, request)
    assert _records(response) == ["apple,red", "banana,yellow", "cherry,red"]


def test_and_requires_every_term(csv_path):
    server = DomainSocketServer("unused", write_delay=0)
    request = build_request(str(csv_path), ["apple", "x", "red"])
    _, response = _exchange(server, request)
    assert _records(response) == ["apple,red"]


def test_no_match_sends_only_eot(csv_path):
    server = DomainSocketServer("unused", write_delay=0)
    sent, response = _exchange(server, build_request(str(csv_path), ["kiwi"]))
    assert response == b"\x03"
    assert sent == 1


def test_long_line_sent_whole(tmp_path):
    path = tmp_path / "long.csv"
    long_line = "needle," + "z" * 100
    path.write_text("short\n" + long_line)
    server = DomainSocketServer("unused", write_delay=0)
    sent, response = _exchange(server, build_request(str(path), ["needle"]))
    assert _records(response) == [long_line]
    assert sent == len(response)


def test_missing_file_is_reported(tmp_path):
    server = DomainSocketServer("unused", write_delay=0)
    request = build_request(str(tmp_path / "missing.csv"), ["a"])
    sent, response = _exchange(server, request)
    assert response == b"INVALID FILE"
    assert sent == len(response)


def test_malformed_request_raises_and_sends_nothing():
    server = DomainSocketServer("unused", write_delay=0)
    left, right = socket.socketpair()
    with left, right:
        left.sendall(b"\x03")
        with pytest.raises(ValueError):
            server.serve_client(right)
        right.close()
        assert left.recv(1024) == b""


def test_serve_forever_answers_a_client(tmp_path, csv_path):
    sock_path = tmp_path / "s.sock"
    server = DomainSocketServer(str(sock_path), abstract=False, write_delay=0)
    server.bind()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        client = DomainSocketClient(str(sock_path), abstract=False)
        lines = client.run(build_request(str(csv_path), ["red"]), io.StringIO())
    finally:
        server.close()
        thread.join(2)
    assert lines == ["apple,red", "cherry,red"]
    assert not sock_path.exists()


def test_main_requires_socket_argument(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().err