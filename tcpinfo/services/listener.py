from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time

from tcpinfo.constants import ACCEPT_POLL_S, LISTEN_HOST
from tcpinfo.services.errors import AcceptError, BindError
from tcpinfo.services.handler import Observer, handle_connection, log, report


class Listener:
    """
    Owns the listening socket and the accept loop of the request service.

    - start(port) binds and returns immediately; accepting runs on its own thread.
    - Every accepted connection gets its own handler thread (no pool, no queue).
    - stop() closes the socket, which ends the accept loop; it is idempotent.
    """

    def __init__(
        self,
        host: str = LISTEN_HOST,
        observer: Observer | None = None,
        poll_interval: float = ACCEPT_POLL_S,
    ) -> None:
        self.host = host
        self.observer = observer
        self.poll_interval = poll_interval
        self._running = threading.Event()
        self._lock = threading.Lock()
        self._sock: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._port: int | None = None

    @property
    def port(self) -> int | None:
        """Actual bound port while running (resolves port 0 to the ephemeral port)."""
        return self._port if self.is_running() else None

    def is_running(self) -> bool:
        return self._running.is_set()

    def _bind(self, port: int) -> socket.socket:
        if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
            raise BindError(port, "port must be an integer in 0..65535")
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, port))
            sock.listen()
            sock.settimeout(self.poll_interval)
        except OSError as e:
            sock.close()
            raise BindError(port, e.strerror or str(e)) from e
        return sock

    def start(self, port: int) -> int:
        """Bind ``port`` and start accepting. Returns the bound port; raises BindError."""
        with self._lock:
            if self.is_running():
                raise BindError(port, f"server already running on port {self._port}")
            sock = self._bind(port)
            self._sock = sock
            self._port = sock.getsockname()[1]
            # Fresh flag per run; a loop left over from an earlier run only sees its own
            self._running = threading.Event()
            self._running.set()
            self._thread = threading.Thread(
                target=self._accept_loop,
                args=(sock, self._port, self._running),
                name=f"accept-{self._port}",
                daemon=True,
            )
            self._thread.start()
        report(self.observer, logging.INFO, f"Server started on port: {self._port}")
        return self._port

    def stop(self, timeout: float = 2.0) -> None:
        """Stop accepting and release the port. Safe to call when not running."""
        with self._lock:
            if not self.is_running():
                return
            self._running.clear()
            sock, self._sock = self._sock, None
            thread, self._thread = self._thread, None
            if sock is not None:
                # shutdown() wakes a blocked accept() on Linux; close() releases the port
                with contextlib.suppress(OSError):
                    sock.shutdown(socket.SHUT_RDWR)
                sock.close()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        report(self.observer, logging.INFO, "Server stopped.")

    def _accept_loop(
        self, sock: socket.socket, port: int, running: threading.Event
    ) -> None:
        log.debug("Accept loop started on %s:%s", self.host, port)
        while running.is_set():
            try:
                conn, addr = sock.accept()
            except TimeoutError:
                continue
            except OSError as e:
                if not running.is_set():
                    # Socket closed by stop()
                    break
                err = AcceptError(str(e))
                report(self.observer, logging.ERROR, f"Accepting client: {err}")
                # Persistent failures (e.g. EMFILE) would otherwise spin
                time.sleep(self.poll_interval)
                continue
            threading.Thread(
                target=handle_connection,
                args=(conn, addr, self.observer),
                name=f"handler-{addr[0]}:{addr[1]}",
                daemon=True,
            ).start()
        log.debug("Accept loop on port %s exited", port)


# Module-level singleton instance driven by the server panel
listener = Listener()
