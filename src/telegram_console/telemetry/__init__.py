"""Operational logging for telegram-console itself.

The system logger is the diagnostic channel for events that must not reach
application call sites, such as failed deliveries.
"""

from telegram_console.telemetry.system_logger import (
    configure_system_logger_file,
    get_system_logger,
)

__all__ = [
    "configure_system_logger_file",
    "get_system_logger",
]
