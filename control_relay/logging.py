"""
Logging configuration for the relay.

Every log line carries the correlation ID of the HTTP request or WebSocket
connection that produced it. Connection handlers attach the ids a socket
registered as (``set_log_context(client_id=...)``), and those fields appear
in the JSON error log written to LOG_FILE_PATH.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

from control_relay.middlewares.correlation_id import get_correlation_id
from control_relay.settings import app_settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Fields attached to every record logged from the current connection
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "correlation_id"}


def set_log_context(**fields: Any) -> None:
    """
    Attach fields to every record logged from the current context.

    Example:
        >>> set_log_context(connection_id="3f2a9c1e", client_id="c1")
    """
    log_context.set({**log_context.get(), **fields})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    """Drop all context fields, called when a connection ends."""
    log_context.set({})


class StructuredJSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Besides level, logger, message and source location, the object holds
    the correlation ID (as ``request_id``), the connection's log context,
    any ``extra=`` attributes and the formatted exception if there is one.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
        }

        if request_id := get_correlation_id():
            entry["request_id"] = request_id

        entry.update(get_log_context())
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter.

    INFO lines show only the message; every other level also shows where
    the record was logged from.
    """

    SHORT_FMT = "%(asctime)s - [%(correlation_id)s] %(levelname)s: %(message)s"
    LONG_FMT = (
        "%(asctime)s - [%(correlation_id)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self) -> None:
        super().__init__()
        self._short = logging.Formatter(self.SHORT_FMT, datefmt=DATE_FORMAT)
        self._long = logging.Formatter(self.LONG_FMT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = get_correlation_id() or "-"
        if record.levelno == logging.INFO:
            return self._short.format(record)
        return self._long.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure the ``control_relay`` logger.

    Records go to stdout in human-readable form. When LOG_FILE_PATH is set,
    ERROR and above are also appended to that file as JSON.

    Returns:
        The configured logger.
    """
    relay_logger = logging.getLogger("control_relay")
    relay_logger.setLevel(app_settings.LOG_LEVEL.upper())
    relay_logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(HumanReadableFormatter())
    relay_logger.addHandler(console)

    if app_settings.LOG_FILE_PATH:
        try:
            error_file = logging.FileHandler(app_settings.LOG_FILE_PATH)
        except OSError as e:
            relay_logger.warning(
                f"Cannot open log file {app_settings.LOG_FILE_PATH}: {e}"
            )
        else:
            error_file.setLevel(logging.ERROR)
            error_file.setFormatter(StructuredJSONFormatter())
            relay_logger.addHandler(error_file)

    return relay_logger


logger = setup_logging()
