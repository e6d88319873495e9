"""Forward stdlib logging records to a TelegramConsole.

Existing code that logs through the logging module can reach the chat
without changes: install a TelegramLogHandler on the root logger (or any
other logger). Other handlers keep working as before; uninstalling removes
exactly the handler that was added.

Level mapping:
    DEBUG and below -> log
    INFO            -> info
    WARNING         -> warn
    ERROR, CRITICAL -> error

The console's own minimum level still applies. Records from
telegram-console's loggers and from httpx/httpcore are ignored, since
forwarding them would feed every delivery back into the queue.
"""

from __future__ import annotations

__all__ = [
    "TelegramLogHandler",
    "install_logging_handler",
    "uninstall_logging_handler",
]

import logging
import threading
from typing import TYPE_CHECKING, Any

from telegram_console.constants import IGNORED_LOGGER_PREFIXES
from telegram_console.levels import level_from_stdlib
from telegram_console.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from telegram_console.console import TelegramConsole


class TelegramLogHandler(logging.Handler):
    """logging.Handler that routes records through TelegramConsole.emit().

    The text body is the rendered log message, followed by the exception
    message when exc_info is set. Metadata carries the logger name and the
    exception type. Dict messages (structured logging) are passed as
    metadata, with their "message" or "event" field as text.
    """

    def __init__(
        self,
        console: "TelegramConsole",
        level: int = logging.NOTSET,
        ignored_prefixes: tuple[str, ...] = IGNORED_LOGGER_PREFIXES,
    ) -> None:
        super().__init__(level)
        self.console = console
        self.ignored_prefixes = ignored_prefixes
        self.target: logging.Logger | None = None
        self._local = threading.local()

    def is_ignored(self, logger_name: str) -> bool:
        return any(
            logger_name == prefix or logger_name.startswith(f"{prefix}.")
            for prefix in self.ignored_prefixes
        )

    def emit(self, record: logging.LogRecord) -> None:
        if self.is_ignored(record.name):
            return

        level = level_from_stdlib(record.levelno)
        if not self.console.should_log(level):
            return

        # A log call made while forwarding (e.g. from a transport) must not recurse
        if getattr(self._local, "active", False):
            return

        self._local.active = True
        try:
            self.console.emit(level, *self.values_for(record))
        except Exception:
            self.handleError(record)
        finally:
            self._local.active = False

    def values_for(self, record: logging.LogRecord) -> list[Any]:
        """Translate a logging record into ingest API arguments."""
        values: list[Any] = []
        context: dict[str, Any] = {"logger": record.name}

        if isinstance(record.msg, dict):
            structured = dict(record.msg)
            text = structured.get("message") or structured.get("event")
            if text:
                values.append(text)
            context.update(structured)
        else:
            values.append(record.getMessage())

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            values.append(exc)
            context["exception"] = type(exc).__name__

        values.append(context)
        return values


def install_logging_handler(
    console: "TelegramConsole",
    logger: logging.Logger | None = None,
    level: int = logging.NOTSET,
) -> TelegramLogHandler:
    """Attach a TelegramLogHandler to logger (root logger by default).

    Note that the logger's own level still gates records before they reach
    the handler: the root logger defaults to WARNING.

    Returns:
        The installed handler, to pass to uninstall_logging_handler().
    """
    target = logger if logger is not None else logging.getLogger()
    handler = TelegramLogHandler(console, level=level)
    handler.target = target
    target.addHandler(handler)

    get_system_logger().info(
        {
            "event": "logging_handler_installed",
            "message": f"Forwarding records from logger {target.name!r}",
            "logger": target.name,
        }
    )
    return handler


def uninstall_logging_handler(handler: TelegramLogHandler) -> None:
    """Remove a handler added by install_logging_handler().

    Other handlers on the logger are left untouched. Safe to call twice.
    """
    target = handler.target
    if target is None:
        return

    target.removeHandler(handler)
    handler.target = None
    handler.close()

    get_system_logger().info(
        {
            "event": "logging_handler_removed",
            "message": f"Stopped forwarding records from logger {target.name!r}",
            "logger": target.name,
        }
    )
