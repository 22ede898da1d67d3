from __future__ import annotations

import platform
from collections.abc import Callable
from datetime import datetime

INVALID_REQUEST = "Invalid request"
UNKNOWN_REQUEST_PREFIX = "Unknown request: "

TIME_FORMAT = "%m/%d/%Y %H:%M:%S"


def current_time(now: datetime | None = None) -> str:
    """Local date-time as MM/dd/yyyy HH:mm:ss."""
    return (now or datetime.now()).strftime(TIME_FORMAT)


def runtime_vendor() -> str:
    return platform.python_implementation()


def runtime_version() -> str:
    return platform.python_version()


COMMANDS: dict[str, Callable[[], str]] = {
    "TIME": current_time,
    "VENDOR": runtime_vendor,
    "VERSION": runtime_version,
}


def normalize_command(request: str | None) -> str:
    """Trim surrounding whitespace and upper-case; an absent request normalizes to ''."""
    if request is None:
        return ""
    return request.strip().upper()


def process_request(request: str | None) -> str:
    """
    Map one request line to its response line.

    ``None`` (stream ended before a line) and blank lines are both invalid.
    """
    command = normalize_command(request)
    if not command:
        return INVALID_REQUEST
    fn = COMMANDS.get(command)
    if fn is None:
        return UNKNOWN_REQUEST_PREFIX + command
    return fn()
