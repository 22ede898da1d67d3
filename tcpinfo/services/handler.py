from __future__ import annotations

import logging
import re
import socket
from collections.abc import Callable

from tcpinfo.constants import SERVER_LOGGER
from tcpinfo.services.commands import process_request
from tcpinfo.services.errors import RequestIOError

log = logging.getLogger(SERVER_LOGGER)

_LINE_END = re.compile(rb"\r\n|\r|\n")

# Receives every report line (started, stopped, request, response, errors)
Observer = Callable[[str], None]


def report(observer: Observer | None, level: int, line: str) -> None:
    """Emit a report line to the server logger and to the optional observer."""
    log.log(level, "%s", line)
    if observer is None:
        return
    try:
        observer(line)
    except Exception:
        log.debug("Observer rejected line %r", line, exc_info=True)


def read_request(conn: socket.socket, bufsize: int = 1024) -> str | None:
    """
    Read one line; None when the peer closed before sending anything.

    The line ends at the first \\n or \\r (a following \\n is not waited for),
    or at end-of-stream. Bytes after the terminator are never interpreted.
    """
    buf = bytearray()
    try:
        while True:
            chunk = conn.recv(bufsize)
            if not chunk:
                break
            buf += chunk
            if b"\n" in chunk or b"\r" in chunk:
                break
    except OSError as e:
        raise RequestIOError(f"read failed: {e}") from e
    if not buf:
        return None
    line = _LINE_END.split(bytes(buf), maxsplit=1)[0]
    return line.decode("utf-8", errors="replace")


def write_response(conn: socket.socket, response: str) -> None:
    try:
        conn.sendall((response + "\n").encode("utf-8"))
    except OSError as e:
        raise RequestIOError(f"write failed: {e}") from e


def handle_connection(
    conn: socket.socket, addr: object = None, observer: Observer | None = None
) -> None:
    """
    Run one Accepted -> Reading -> Dispatching -> Responding -> Closed cycle.

    The connection is closed on every path. I/O failures are reported and
    never raised, so one bad client cannot disturb the accept loop or other
    handlers.
    """
    log.debug("Handling connection from %s", addr)
    with conn:
        try:
            request = read_request(conn)
            response = process_request(request)
            report(observer, logging.INFO, f"Received request: {request}")
            report(observer, logging.INFO, f"Sent response: {response}")
            write_response(conn, response)
        except RequestIOError as e:
            report(observer, logging.WARNING, f"Handling client: {e}")
    log.debug("Closed connection from %s", addr)
