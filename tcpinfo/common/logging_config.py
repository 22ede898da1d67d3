from __future__ import annotations

import logging
import sys
import threading
import weakref

from nicegui import ui

from tcpinfo.constants import CLIENT_LOGGER, SERVER_LOGGER

_LEVEL_COLORS = {
    "TRACE": "\033[32m",  # green
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[37m",  # light gray
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[41m",  # red background
}
_RESET = "\033[0m"
_DIM = "\033[2m"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]


class AnsiColorFormatter(logging.Formatter):
    """Console formatter: dimmed timestamp, level name colored by severity."""

    def __init__(self, colored: bool = True) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"
        )
        self.colored = colored and sys.stderr.isatty()

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ts = super().formatTime(record, datefmt)
        return f"{_DIM}{ts}{_RESET}" if self.colored else ts

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname, "") if self.colored else ""
        if not color:
            return super().formatMessage(record)
        # Color a copy; other handlers share the record
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{_RESET}"
        return super().formatMessage(tinted)


# ---- NiceGUI UI log handler ----

# widget ref -> logger name prefix ("" accepts every record)
_ui_log_targets: dict[weakref.ref, str] = {}
_ui_lock = threading.Lock()


def _matches(record_name: str, prefix: str) -> bool:
    return not prefix or record_name == prefix or record_name.startswith(prefix + ".")


class NiceGuiLogHandler(logging.Handler):
    """Push log records into one or more NiceGUI ui.log widgets.

    The panels show the bare message, the way the server and client log
    areas read: "Server started on port: 5000", "Sent response: ...".
    """

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self.setFormatter(logging.Formatter("%(asctime)s %(message)s", "%H:%M:%S"))

    def emit(self, record: logging.LogRecord) -> None:
        if not _ui_log_targets:
            return
        msg = self.format(record)
        stale: list[weakref.ref] = []
        with _ui_lock:
            for ref, prefix in list(_ui_log_targets.items()):
                widget = ref()
                if widget is None:
                    stale.append(ref)
                    continue
                if not _matches(record.name, prefix):
                    continue
                try:
                    widget.push(msg)
                except Exception:
                    # Client disconnected or element deleted
                    stale.append(ref)
            for ref in stale:
                _ui_log_targets.pop(ref, None)


def attach_ui_log(log_widget: ui.log, logger_name: str = "") -> None:
    """Register a ui.log widget as a sink for records of ``logger_name`` and its children."""
    try:
        ref = weakref.ref(log_widget)
    except TypeError:
        return
    with _ui_lock:
        _ui_log_targets[ref] = logger_name


def detach_ui_log(log_widget: ui.log) -> None:
    """Unregister a ui.log widget."""
    try:
        ref = weakref.ref(log_widget)
    except TypeError:
        return
    with _ui_lock:
        _ui_log_targets.pop(ref, None)


def _have_console_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h, logging.StreamHandler) for h in logger.handlers)


def _have_ui_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h, NiceGuiLogHandler) for h in logger.handlers)


def configure_logging(
    level: int = logging.INFO, use_color: bool = True, add_ui_handler: bool = True
) -> logging.Logger:
    """
    Configure root logger with:
      - ANSI-colored console handler (stderr) with timestamps and levels
      - Optional NiceGUI UI log handler (messages mirrored to the panel logs)
    Idempotent across multiple calls.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    if not _have_console_handler(logger):
        console = logging.StreamHandler(stream=sys.stderr)
        console.setLevel(level)
        console.setFormatter(AnsiColorFormatter(colored=use_color))
        logger.addHandler(console)

    if add_ui_handler and not _have_ui_handler(logger):
        # The panels always show lifecycle lines, whatever the console level
        ui_handler = NiceGuiLogHandler(level=min(level, logging.INFO))
        logger.addHandler(ui_handler)
        for name in (SERVER_LOGGER, CLIENT_LOGGER):
            named = logging.getLogger(name)
            if named.level == logging.NOTSET or named.level > logging.INFO:
                named.setLevel(min(level, logging.INFO))

    return logger
