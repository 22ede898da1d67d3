from __future__ import annotations

import re

# Optional sign and ASCII digits only: no "5_000", no " 5 0", no non-ASCII digits
_PORT_RE = re.compile(r"[+-]?[0-9]+")


def parse_port(text: str | None) -> int:
    """Parse a TCP port typed into a panel field; raises ValueError when unusable."""
    s = (text or "").strip()
    if not s:
        raise ValueError("port is required")
    if not _PORT_RE.fullmatch(s):
        raise ValueError(f"invalid port {s!r}")
    port = int(s)
    if not 0 <= port <= 65535:
        raise ValueError(f"port {port} out of range 0..65535")
    return port
