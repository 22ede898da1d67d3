from __future__ import annotations

import logging
import socket

from tcpinfo.constants import CLIENT_HOST, CLIENT_LOGGER, CLIENT_TIMEOUT_S, LISTEN_PORT

log = logging.getLogger(CLIENT_LOGGER)


def send_request(
    host: str, port: int, request: str, timeout: float = CLIENT_TIMEOUT_S
) -> str | None:
    """
    Open a connection, send one request line, read one response line, close.

    Returns the response without its line terminator, or None when the server
    closed the connection without answering. Connection and I/O errors
    (OSError, including TimeoutError) propagate to the caller.
    """
    with socket.create_connection((host, port), timeout=timeout) as sock:
        sock.sendall((request + "\n").encode("utf-8"))
        log.info("Sent request: %s", request)
        with sock.makefile("r", encoding="utf-8", errors="replace", newline="") as reader:
            line = reader.readline()
    response = line.rstrip("\r\n") if line else None
    log.info("Received response: %s", response)
    return response


class TcpInfoClient:
    """One-shot request client bound to a default server target."""

    def __init__(
        self,
        host: str = CLIENT_HOST,
        port: int = LISTEN_PORT,
        timeout: float = CLIENT_TIMEOUT_S,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def request(
        self, command: str, host: str | None = None, port: int | None = None
    ) -> str | None:
        return send_request(
            host or self.host,
            self.port if port is None else port,
            command,
            timeout=self.timeout,
        )


# Module-level singleton instance
client = TcpInfoClient()
