import argparse
import logging
import signal
import threading

from nicegui import app as ng_app
from nicegui import ui

from tcpinfo.common.logging_config import TRACE, attach_ui_log, configure_logging
from tcpinfo.constants import (
    AUTO_START,
    CLIENT_LOGGER,
    LISTEN_HOST,
    LISTEN_PORT,
    LOG_LEVEL,
    SERVER_HOST,
    SERVER_LOGGER,
    SERVER_PORT,
)
from tcpinfo.pages.client import ClientPage
from tcpinfo.pages.server import ServerPage
from tcpinfo.services.errors import BindError
from tcpinfo.services.listener import listener
from tcpinfo.state import client_state, server_state

# Runtime configuration (resolved later from CLI/env)
RUNTIME_SERVER_HOST = SERVER_HOST
RUNTIME_SERVER_PORT = SERVER_PORT
RUNTIME_LISTEN_PORT = LISTEN_PORT
RUNTIME_AUTO_START = AUTO_START

# Page instances
server_page_instance = ServerPage()
client_page_instance = ClientPage()


def build_header_and_tabs() -> None:
    with ui.header().classes("p-0"), ui.row().classes("w-full items-center"):
        with ui.tabs() as main_tabs:
            server_tab = ui.tab("Server")
            client_tab = ui.tab("Client")
        ui.label("TCP info service").classes("text-sm")

    with ui.tab_panels(main_tabs, value=server_tab).classes("w-full"):
        with ui.tab_panel(server_tab):
            server_page_instance.build()
        with ui.tab_panel(client_tab):
            client_page_instance.build()


@ui.page("/")
def index() -> None:
    build_header_and_tabs()
    # Each panel only mirrors its own side of the exchange
    if server_page_instance.response_log:
        attach_ui_log(server_page_instance.response_log, SERVER_LOGGER)
    if client_page_instance.response_log:
        attach_ui_log(client_page_instance.response_log, CLIENT_LOGGER)


def _app_startup() -> None:
    if not RUNTIME_AUTO_START:
        return
    try:
        listener.start(RUNTIME_LISTEN_PORT)
    except BindError as e:
        logging.getLogger(SERVER_LOGGER).error("Starting server: %s", e)
        return
    server_page_instance.sync_state()


ng_app.on_startup(_app_startup)
ng_app.on_shutdown(listener.stop)


def run_headless(port: int) -> int:
    """Run only the request listener until SIGINT/SIGTERM. Returns a process exit code."""
    try:
        listener.start(port)
    except BindError as e:
        logging.getLogger(SERVER_LOGGER).error("Starting server: %s", e)
        return 1

    stop_requested = threading.Event()

    def _on_signal(signum, frame):
        stop_requested.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)
    # wait() with a timeout keeps the main thread responsive to signals
    while not stop_requested.wait(timeout=0.5):
        pass
    listener.stop()
    return 0


if __name__ in {"__main__", "__mp_main__"}:
    parser = argparse.ArgumentParser(description="TCP info service (NiceGUI panels)")
    parser.add_argument("--host", default=SERVER_HOST, help="Webserver bind host")
    parser.add_argument(
        "--port", type=int, default=SERVER_PORT, help="Webserver bind port"
    )
    parser.add_argument(
        "--server-port",
        type=int,
        default=LISTEN_PORT,
        help=f"Request listener port (listener binds {LISTEN_HOST})",
    )
    parser.add_argument(
        "--auto-start",
        action="store_true",
        default=AUTO_START,
        help="Start the request listener at startup (overrides TCPINFO_AUTO_START)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run only the request listener, without the web panels",
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set log level",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Enable WARNING logging"
    )
    args, _ = parser.parse_known_args()

    RUNTIME_SERVER_HOST = args.host
    RUNTIME_SERVER_PORT = int(args.port)
    RUNTIME_LISTEN_PORT = int(args.server_port)
    RUNTIME_AUTO_START = args.auto_start

    server_state.port_text = str(RUNTIME_LISTEN_PORT)
    client_state.port_text = str(RUNTIME_LISTEN_PORT)

    # Resolve log level priority: explicit --log-level > -v/-q > env default from constants
    if args.log_level:
        if args.log_level == "TRACE":
            RUNTIME_LOG_LEVEL = TRACE
        else:
            RUNTIME_LOG_LEVEL = getattr(logging, args.log_level)
    elif args.verbose >= 3:
        RUNTIME_LOG_LEVEL = TRACE
    elif args.verbose >= 2:
        RUNTIME_LOG_LEVEL = logging.DEBUG
    elif args.verbose == 1:
        RUNTIME_LOG_LEVEL = logging.INFO
    elif args.quiet:
        RUNTIME_LOG_LEVEL = logging.WARNING
    else:
        RUNTIME_LOG_LEVEL = LOG_LEVEL

    if args.headless:
        # Headless runs still need the lifecycle lines on the console
        configure_logging(min(RUNTIME_LOG_LEVEL, logging.INFO), add_ui_handler=False)
        raise SystemExit(run_headless(RUNTIME_LISTEN_PORT))

    configure_logging(RUNTIME_LOG_LEVEL)
    logging.info(
        f"Webserver bind: host={RUNTIME_SERVER_HOST} port={RUNTIME_SERVER_PORT}"
    )
    logging.info(f"Request listener port: {RUNTIME_LISTEN_PORT}")

    ui.run(
        title="TCP Info Service",
        host=RUNTIME_SERVER_HOST,
        port=RUNTIME_SERVER_PORT,
        reload=False,
        show=False,
    )
