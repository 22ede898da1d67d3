from nicegui import binding

from tcpinfo.constants import CLIENT_HOST, LISTEN_PORT


# Shared UI state singletons for cross-module access
@binding.bindable_dataclass
class ServerPanelState:
    running: bool = False
    port: int | None = None  # actual bound port while running
    port_text: str = str(LISTEN_PORT)  # raw input field value
    status: str = "stopped"


@binding.bindable_dataclass
class ClientPanelState:
    host: str = CLIENT_HOST
    port_text: str = str(LISTEN_PORT)
    request: str = "TIME"
    last_response: str = ""


# Module-level singletons
server_state = ServerPanelState()
client_state = ClientPanelState()
