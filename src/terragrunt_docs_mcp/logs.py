"""Logger construction.

The server never configures the root logger. `build_logger` returns a dedicated,
non-propagating logger that callers pass explicitly to the dispatcher and clients,
so tests can hand in their own logger without touching global state.

Logs go to stderr: stdout is the MCP stdio transport and must only carry protocol messages.
Once a client session exists, records are also forwarded to the client as MCP log
message notifications (`SessionLogHandler`).
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from .config import LoggingConfig

LOGGER_NAME = "terragrunt_docs_mcp"


class ConsoleFormatter(logging.Formatter):
    """`[LEVEL] 2025-01-01T00:00:00.000Z - message`"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        stamp = timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        line = f"[{record.levelname}] {stamp} - {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per record, for the optional file sink."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def build_logger(
    config: LoggingConfig,
    *,
    name: str = LOGGER_NAME,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Build the server logger from config.

    Calling this again for the same name replaces the previous handlers.
    """
    log = logging.getLogger(name)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    log.setLevel(logging.DEBUG)
    log.propagate = False

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(config.level)
    console.setFormatter(ConsoleFormatter())
    log.addHandler(console)

    if config.file_enabled:
        try:
            file_handler = logging.FileHandler(config.file_path, encoding="utf-8")
        except OSError as exc:
            log.error("Failed to initialize file logger: %s. File logging will be disabled.", exc)
        else:
            file_handler.setLevel(config.file_level)
            file_handler.setFormatter(JsonLinesFormatter())
            log.addHandler(file_handler)
            log.info("File logging enabled: level=%s", config.file_level)
    else:
        log.debug("File logging is disabled.")

    return log


_MCP_TO_LOGGING = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}


def mcp_level_for(levelno: int) -> str:
    """Map a logging level number to the MCP log level name."""
    if levelno >= logging.CRITICAL:
        return "critical"
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warning"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


class SessionLogHandler(logging.Handler):
    """Forwards records to the connected MCP client as log message notifications.

    Records are only forwarded from inside the event loop; sending happens in a
    background task so logging never blocks a tool call.
    """

    def __init__(self, session: Any, level: int | str = logging.INFO) -> None:
        super().__init__(level)
        self.session = session
        self._pending: set[asyncio.Task[None]] = set()

    async def _send(self, record: logging.LogRecord, message: str) -> None:
        try:
            await self.session.send_log_message(
                level=mcp_level_for(record.levelno),
                data=message,
                logger=record.name,
            )
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        try:
            message = self.format(record)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)
            return
        task = loop.create_task(self._send(record, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def bind_session_logging(
    log: logging.Logger,
    session: Any,
    *,
    level: int | str = logging.INFO,
) -> SessionLogHandler | None:
    """Attach a SessionLogHandler for session to log.

    Returns the new handler, or None if log is already bound to this session.
    A handler bound to an earlier session is replaced.
    """
    for handler in list(log.handlers):
        if isinstance(handler, SessionLogHandler):
            if handler.session is session:
                return None
            log.removeHandler(handler)

    handler = SessionLogHandler(session, level=level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    return handler


def unbind_session_logging(log: logging.Logger) -> None:
    for handler in list(log.handlers):
        if isinstance(handler, SessionLogHandler):
            log.removeHandler(handler)


def set_session_log_level(log: logging.Logger, mcp_level: str) -> None:
    """Apply a client's logging/setLevel request to the session handler."""
    level = _MCP_TO_LOGGING.get(str(mcp_level).lower(), logging.INFO)
    for handler in log.handlers:
        if isinstance(handler, SessionLogHandler):
            handler.setLevel(level)
