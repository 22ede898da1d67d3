from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tcpinfo.services.listener import Listener
from tests.utils.observer import LineRecorder

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def recorder() -> LineRecorder:
    """Thread-safe sink for the report lines a Listener emits."""
    return LineRecorder()


@pytest.fixture
def running_listener(recorder: LineRecorder) -> Iterator[Listener]:
    """
    Listener bound to an ephemeral port on 127.0.0.1 with:
      - a short accept poll so stop() returns quickly
      - the recorder fixture as observer
    Always stopped on teardown.
    """
    server = Listener(host="127.0.0.1", observer=recorder, poll_interval=0.05)
    server.start(0)
    try:
        yield server
    finally:
        server.stop()
