from __future__ import annotations


class TcpInfoError(Exception):
    """Base class for request service errors."""


class BindError(TcpInfoError):
    """The listening socket could not be bound (bad port, port in use, ...)."""

    def __init__(self, port: object, reason: str) -> None:
        super().__init__(f"Cannot bind port {port}: {reason}")
        self.port = port
        self.reason = reason


class AcceptError(TcpInfoError):
    """accept() failed while the listener was still running."""


class RequestIOError(TcpInfoError):
    """Reading the command or writing the response failed on one connection."""
