from __future__ import annotations

import logging

from nicegui import run, ui

from tcpinfo.common.validation import parse_port
from tcpinfo.constants import CLIENT_LOGGER
from tcpinfo.services.commands import COMMANDS
from tcpinfo.services.tcp_client import TcpInfoClient, client
from tcpinfo.state import client_state

log = logging.getLogger(CLIENT_LOGGER)


class ClientPage:
    """Client tab page."""

    def __init__(self, tcp_client: TcpInfoClient = client) -> None:
        self.client = tcp_client
        self.request_input: ui.input | None = None
        self.response_log: ui.log | None = None

    async def send_request(self) -> None:
        """Send the request field to host:port and log the reply (blocking I/O off the event loop)."""
        try:
            port = parse_port(client_state.port_text)
        except ValueError as e:
            log.error("Error: %s", e)
            return
        host = (client_state.host or "").strip() or self.client.host
        request = client_state.request or ""
        try:
            response = await run.io_bound(self.client.request, request, host, port)
        except OSError as e:
            log.error("Error: %s", e)
            ui.notify(f"Request failed: {e}", color="negative")
            return
        client_state.last_response = "" if response is None else response

    def build(self) -> None:
        """Build the Client page content."""
        with ui.card().classes("w-full"):
            ui.label("TCP Client").classes("text-md font-medium")
            with ui.row().classes("items-center gap-4"):
                ui.input(label="Server Address").bind_value(client_state, "host").props(
                    "dense"
                )
                ui.input(label="Port").bind_value(client_state, "port_text").props(
                    "dense"
                ).classes("w-24")
                self.request_input = (
                    ui.input(label="Request", autocomplete=list(COMMANDS))
                    .bind_value(client_state, "request")
                    .props("dense")
                )
                self.request_input.on("keydown.enter", self.send_request)
                ui.button("Send Request", on_click=self.send_request).props("unelevated")
            ui.label().bind_text_from(
                client_state, "last_response", backward=lambda v: f"Last response: {v}"
            ).classes("text-sm")
            self.response_log = ui.log(max_lines=500).classes("w-full h-80")
