"""Public ingest API: level filter, formatting and enqueue.

TelegramConsole is what applications hold. Its log()/info()/warn()/error()
methods return as soon as the record is queued; delivery happens on the
queue's drain loop and failures never reach the caller.

Example:
    console = TelegramConsole.from_config(config)
    console.warn("Disk almost full", {"free_gb": 1.2})
    console.error("Payment failed", exc)

    # Synchronous programs
    console.close()

    # Async programs
    async with TelegramConsole.from_config(config) as console:
        console.info("Worker started")
"""

from __future__ import annotations

__all__ = ["TelegramConsole"]

import asyncio
import concurrent.futures
import logging
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

from telegram_console.constants import DEFAULT_MAX_LOG_LENGTH, DEFAULT_MIN_LOG_LEVEL
from telegram_console.delivery.queue import DeliveryQueue, QueueStats
from telegram_console.delivery.transport import TelegramTransport
from telegram_console.formatting import (
    clamp_max_log_length,
    format_message,
    iso_timestamp,
    split_values,
    truncate,
)
from telegram_console.levels import LogLevel, parse_level
from telegram_console.models import LogRecord
from telegram_console.telemetry.system_logger import configure_system_logger_file, get_system_logger

if TYPE_CHECKING:
    from telegram_console.config import TelegramConsoleConfig
    from telegram_console.delivery.transport import Transport
    from telegram_console.integrations.logging_handler import TelegramLogHandler


class TelegramConsole:
    """Forwards log calls to a remote chat, in order, without blocking.

    Records below min_log_level are dropped before any formatting work.
    Accepted records are formatted, truncated to max_log_length and
    appended to a DeliveryQueue.

    Both knobs can change at runtime; the change applies to records ingested
    afterwards, never to records already queued.
    """

    def __init__(
        self,
        transport: "Transport",
        *,
        min_log_level: LogLevel | str = DEFAULT_MIN_LOG_LEVEL,
        max_log_length: int = DEFAULT_MAX_LOG_LENGTH,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
        owns_transport: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            transport: Destination for formatted records.
            min_log_level: Lowest level forwarded.
            max_log_length: Maximum characters per message (clamped to 32-4096).
            loop: Event loop for the drain (see DeliveryQueue).
            logger: Diagnostic logger for delivery failures.
            owns_transport: Close the transport in close()/aclose().
        """
        self._transport = transport
        self._queue = DeliveryQueue(transport, loop=loop, logger=logger)
        self._min_log_level = parse_level(min_log_level)
        self._max_log_length = clamp_max_log_length(max_log_length)
        self._owns_transport = owns_transport
        self._logging_handler: "TelegramLogHandler | None" = None
        self._closed = False

    @classmethod
    def from_config(
        cls,
        config: "TelegramConsoleConfig",
        *,
        transport: "Transport | None" = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> "TelegramConsole":
        """Build a console from configuration.

        Creates a TelegramTransport unless one is given, configures the
        system log file if set, and installs the logging handler when
        intercept_logging is enabled.
        """
        if config.system_log_path:
            configure_system_logger_file(Path(config.system_log_path).expanduser())

        owns_transport = transport is None
        if transport is None:
            transport = TelegramTransport.from_config(config)

        console = cls(
            transport,
            min_log_level=config.min_log_level,
            max_log_length=config.max_log_length,
            loop=loop,
            owns_transport=owns_transport,
        )
        if config.intercept_logging:
            console.intercept_logging()
        return console

    # -------------------------------------------------------------------------
    # Ingest API
    # -------------------------------------------------------------------------

    def log(self, *values: Any) -> None:
        self.emit(LogLevel.LOG, *values)

    def info(self, *values: Any) -> None:
        self.emit(LogLevel.INFO, *values)

    def warn(self, *values: Any) -> None:
        self.emit(LogLevel.WARN, *values)

    warning = warn

    def error(self, *values: Any) -> None:
        self.emit(LogLevel.ERROR, *values)

    def emit(self, level: LogLevel | str, *values: Any) -> LogRecord | None:
        """Filter, format and enqueue one log call.

        Args:
            level: Severity of the call.
            *values: Text, exceptions and mappings in any order.

        Returns:
            The queued record, or None if the level was filtered out.
        """
        level = parse_level(level)
        if not self.should_log(level):
            return None

        record = self.build_record(level, values)
        self._queue.enqueue(record)
        return record

    def should_log(self, level: LogLevel) -> bool:
        return level >= self._min_log_level

    def build_record(self, level: LogLevel, values: tuple[Any, ...] | list[Any]) -> LogRecord:
        """Format and truncate raw values into a LogRecord (no filtering)."""
        text, metadata = split_values(values)
        timestamp = iso_timestamp()
        message = truncate(format_message(level, text, metadata, timestamp), self._max_log_length)
        return LogRecord(level=level, message=message, timestamp=timestamp, metadata=metadata or None)

    # -------------------------------------------------------------------------
    # Runtime configuration
    # -------------------------------------------------------------------------

    @property
    def min_log_level(self) -> LogLevel:
        return self._min_log_level

    @property
    def max_log_length(self) -> int:
        return self._max_log_length

    def set_min_log_level(self, level: LogLevel | str) -> None:
        """Change the minimum level for subsequent calls."""
        self._min_log_level = parse_level(level)

    def set_max_log_length(self, length: int) -> None:
        """Change the maximum message length (clamped to 32-4096)."""
        self._max_log_length = clamp_max_log_length(length)

    # -------------------------------------------------------------------------
    # Queue state
    # -------------------------------------------------------------------------

    @property
    def pending(self) -> int:
        return self._queue.pending

    @property
    def stats(self) -> QueueStats:
        return self._queue.stats

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Logging integration
    # -------------------------------------------------------------------------

    def intercept_logging(self, logger: logging.Logger | None = None) -> "TelegramLogHandler":
        """Forward stdlib logging records from logger (root by default).

        Idempotent: a second call returns the installed handler.
        """
        from telegram_console.integrations.logging_handler import install_logging_handler

        if self._logging_handler is None:
            self._logging_handler = install_logging_handler(self, logger)
        return self._logging_handler

    def restore_logging(self) -> None:
        """Remove the handler installed by intercept_logging(), if any."""
        from telegram_console.integrations.logging_handler import uninstall_logging_handler

        if self._logging_handler is not None:
            uninstall_logging_handler(self._logging_handler)
            self._logging_handler = None

    # -------------------------------------------------------------------------
    # Flush and close
    # -------------------------------------------------------------------------

    async def flush(self, timeout: float | None = None) -> bool:
        """Wait until every queued record was handed to the transport."""
        return await self._queue.flush(timeout)

    def flush_sync(self, timeout: float | None = None) -> bool:
        """Blocking flush() for synchronous programs."""
        return self._queue.flush_sync(timeout)

    async def aclose(self, timeout: float | None = None) -> bool:
        """Flush, release the transport and stop background work.

        Returns:
            True if the queue drained before closing.
        """
        if self._closed:
            return True
        self._closed = True
        self.restore_logging()

        drained = await self._queue.flush(timeout)

        if self._owns_transport and isinstance(self._transport, TelegramTransport):
            if self._queue.uses_background_loop:
                await asyncio.wrap_future(self._queue.submit_to_loop(self._transport.aclose()))
            else:
                await self._transport.aclose()

        self._queue.close()
        return drained

    def close(self, timeout: float | None = None) -> bool:
        """Synchronous aclose() for programs without a running event loop.

        Raises:
            RuntimeError: If called from inside a running event loop.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError("close() called from a running event loop; use await console.aclose()")

        if self._closed:
            return True
        self._closed = True
        self.restore_logging()

        drained = self._queue.flush_sync(timeout)

        if self._owns_transport and isinstance(self._transport, TelegramTransport):
            try:
                if self._queue.uses_background_loop:
                    self._queue.submit_to_loop(self._transport.aclose()).result(timeout)
                else:
                    asyncio.run(self._transport.aclose())
            except (RuntimeError, TimeoutError, concurrent.futures.TimeoutError) as e:
                # Client bound to a loop that is gone; nothing left to release
                get_system_logger().warning(
                    {
                        "event": "transport_close_failed",
                        "message": f"Could not close transport cleanly: {e}",
                        "error_type": type(e).__name__,
                    }
                )

        self._queue.close()
        return drained

    async def __aenter__(self) -> "TelegramConsole":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __enter__(self) -> "TelegramConsole":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
