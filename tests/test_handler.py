from __future__ import annotations

import platform
import socket
import threading

import pytest

from tcpinfo.services.handler import handle_connection, read_request
from tests.utils.observer import LineRecorder


def _read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        data = sock.recv(4096)
        if not data:
            return b"".join(chunks)
        chunks.append(data)


class BrokenConn:
    """Connection stand-in whose stream fails on read."""

    def __init__(self) -> None:
        self.closed = False

    def recv(self, bufsize: int) -> bytes:
        raise ConnectionResetError("peer reset")

    def sendall(self, data: bytes) -> None:
        raise AssertionError("must not write after a failed read")

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@pytest.mark.unit
def test_handler_answers_one_line_and_closes():
    server_end, client_end = socket.socketpair()
    recorder = LineRecorder()
    with client_end:
        client_end.sendall(b"  version \r\n")
        handle_connection(server_end, "pair", observer=recorder)
        assert _read_all(client_end) == (platform.python_version() + "\n").encode()
    assert server_end.fileno() == -1
    assert recorder.lines == [
        "Received request:   version ",
        f"Sent response: {platform.python_version()}",
    ]


@pytest.mark.unit
def test_handler_treats_end_of_stream_as_invalid_request():
    server_end, client_end = socket.socketpair()
    recorder = LineRecorder()
    with client_end:
        client_end.shutdown(socket.SHUT_WR)
        handle_connection(server_end, "pair", observer=recorder)
        assert _read_all(client_end) == b"Invalid request\n"
    assert recorder.lines == ["Received request: None", "Sent response: Invalid request"]


@pytest.mark.unit
def test_handler_reads_only_the_first_line():
    server_end, client_end = socket.socketpair()
    recorder = LineRecorder()
    with client_end:
        client_end.sendall(b"banana\nTIME\n")
        handle_connection(server_end, "pair", observer=recorder)
        assert _read_all(client_end) == b"Unknown request: BANANA\n"
    assert recorder.matching("Received request:") == ["Received request: banana"]


@pytest.mark.unit
def test_handler_reports_write_failure_and_still_closes():
    server_end, client_end = socket.socketpair()
    client_end.close()
    recorder = LineRecorder()

    handle_connection(server_end, "pair", observer=recorder)

    assert server_end.fileno() == -1
    failures = recorder.matching("Handling client:")
    assert len(failures) == 1
    assert "write failed" in failures[0]


@pytest.mark.unit
def test_handler_reports_read_failure_and_closes():
    conn = BrokenConn()
    recorder = LineRecorder()

    handle_connection(conn, "broken", observer=recorder)  # type: ignore[arg-type]

    assert conn.closed
    assert recorder.lines == ["Handling client: read failed: peer reset"]


@pytest.mark.unit
def test_handler_survives_a_failing_observer():
    server_end, client_end = socket.socketpair()

    def _bad_observer(line: str) -> None:
        raise RuntimeError("ui gone")

    with client_end:
        client_end.sendall(b"vendor\n")
        handle_connection(server_end, "pair", observer=_bad_observer)
        assert _read_all(client_end) == (platform.python_implementation() + "\n").encode()


@pytest.mark.unit
def test_read_request_strips_only_the_terminator():
    server_end, client_end = socket.socketpair()
    with server_end, client_end:
        client_end.sendall(b" time \r\n")
        assert read_request(server_end) == " time "


@pytest.mark.unit
def test_bare_carriage_return_ends_the_request_line():
    server_end, client_end = socket.socketpair()
    recorder = LineRecorder()
    with client_end:
        # No \n follows and the client keeps its side open
        client_end.sendall(b"VERSION\r")
        handler = threading.Thread(
            target=handle_connection, args=(server_end, "pair", recorder), daemon=True
        )
        handler.start()
        handler.join(timeout=2.0)
        assert not handler.is_alive()
        assert _read_all(client_end) == (platform.python_version() + "\n").encode()
    assert recorder.matching("Received request:") == ["Received request: VERSION"]


@pytest.mark.unit
def test_read_request_returns_partial_line_at_end_of_stream():
    server_end, client_end = socket.socketpair()
    with server_end, client_end:
        client_end.sendall(b"vendor")
        client_end.shutdown(socket.SHUT_WR)
        assert read_request(server_end) == "vendor"
