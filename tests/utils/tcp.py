from __future__ import annotations

import contextlib
import socket
import threading


def exchange(host: str, port: int, payload: bytes, timeout: float = 2.0) -> bytes:
    """
    Send raw bytes and read until the server closes the connection.
    Returns everything received (the server writes one line, then closes).
    """
    chunks: list[bytes] = []
    with socket.create_connection((host, port), timeout=timeout) as s:
        if payload:
            s.sendall(payload)
        # End-of-stream after the payload; an empty payload is a client that sends nothing
        s.shutdown(socket.SHUT_WR)
        while True:
            try:
                data = s.recv(4096)
            except ConnectionResetError:
                break
            if not data:
                break
            chunks.append(data)
    return b"".join(chunks)


def free_port() -> int:
    """Return a port that was free a moment ago (nothing listening on it)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@contextlib.contextmanager
def one_shot_server(reply: bytes | None):
    """
    Listen on an ephemeral port, accept a single connection, read a line and
    answer with ``reply`` (or close without answering when reply is None).
    Yields (port, received) where received collects the request lines.
    """
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    srv.settimeout(2.0)
    received: list[bytes] = []

    def _serve() -> None:
        try:
            conn, _ = srv.accept()
        except OSError:
            return
        with conn:
            with conn.makefile("rb") as reader:
                received.append(reader.readline())
            if reply is not None:
                conn.sendall(reply)

    th = threading.Thread(target=_serve, name="one-shot-server", daemon=True)
    th.start()
    try:
        yield srv.getsockname()[1], received
    finally:
        th.join(timeout=2.0)
        srv.close()
