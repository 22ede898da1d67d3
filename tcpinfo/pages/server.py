from __future__ import annotations

import logging

from nicegui import ui

from tcpinfo.common.validation import parse_port
from tcpinfo.constants import SERVER_LOGGER
from tcpinfo.services.errors import BindError
from tcpinfo.services.listener import Listener, listener
from tcpinfo.state import server_state

log = logging.getLogger(SERVER_LOGGER)


class ServerPage:
    """Server tab page: port field, start/stop and the server log."""

    def __init__(self, server: Listener = listener) -> None:
        self.server = server
        self.port_input: ui.input | None = None
        self.status_label: ui.label | None = None
        self.response_log: ui.log | None = None

    def sync_state(self) -> None:
        server_state.running = self.server.is_running()
        server_state.port = self.server.port
        server_state.status = (
            f"running on port {server_state.port}" if server_state.running else "stopped"
        )

    def start_server(self) -> None:
        try:
            port = parse_port(server_state.port_text)
        except ValueError as e:
            log.error("Starting server: %s", e)
            ui.notify(f"Invalid port: {e}", color="warning")
            return
        try:
            self.server.start(port)
        except BindError as e:
            log.error("Starting server: %s", e)
            ui.notify(str(e), color="negative")
        finally:
            self.sync_state()

    def stop_server(self) -> None:
        self.server.stop()
        self.sync_state()

    def build(self) -> None:
        """Build the Server page content."""
        with ui.card().classes("w-full"):
            ui.label("TCP Server").classes("text-md font-medium")
            with ui.row().classes("items-center gap-4"):
                self.port_input = (
                    ui.input(label="Port")
                    .bind_value(server_state, "port_text")
                    .props("dense")
                    .classes("w-32")
                )
                self.port_input.on("keydown.enter", self.start_server)
                ui.button("Start Server", on_click=self.start_server).props(
                    "unelevated"
                ).bind_enabled_from(server_state, "running", backward=lambda v: not v)
                ui.button("Stop Server", on_click=self.stop_server).props(
                    "unelevated color=negative"
                ).bind_enabled_from(server_state, "running")
                self.status_label = (
                    ui.label()
                    .bind_text_from(server_state, "status", backward=lambda v: f"Status: {v}")
                    .classes("text-sm")
                )
            self.response_log = ui.log(max_lines=500).classes("w-full h-80")
        self.sync_state()
