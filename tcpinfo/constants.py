from __future__ import annotations

import logging
import os

_TRUTHY = ("1", "true", "True", "yes", "YES", "on")

# Webserver bind (NiceGUI host/port)
SERVER_HOST: str = os.getenv("TCPINFO_SERVER_IP", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("TCPINFO_SERVER_PORT", "8080"))

# Request listener bind (what TCP clients connect to)
LISTEN_HOST: str = os.getenv("TCPINFO_LISTEN_HOST", "0.0.0.0")
LISTEN_PORT: int = int(os.getenv("TCPINFO_LISTEN_PORT", "5000"))
AUTO_START: bool = os.getenv("TCPINFO_AUTO_START", "0") in _TRUTHY

# Client defaults
CLIENT_HOST: str = os.getenv("TCPINFO_CLIENT_HOST", "127.0.0.1")
CLIENT_TIMEOUT_S: float = float(os.getenv("TCPINFO_CLIENT_TIMEOUT", "5.0"))

# Accept loop poll interval; bounds how long stop() waits on platforms where
# closing the listening socket does not wake a blocked accept()
ACCEPT_POLL_S: float = 0.25

SERVER_LOGGER = "tcpinfo.server"
CLIENT_LOGGER = "tcpinfo.client"


def _resolve_log_level(default: int = logging.WARNING) -> int:
    """TCPINFO_LOG_LEVEL by name (any registered level, case-insensitive); default otherwise."""
    name = os.getenv("TCPINFO_LOG_LEVEL", "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


LOG_LEVEL: int = _resolve_log_level()
