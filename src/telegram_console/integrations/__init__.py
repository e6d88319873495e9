"""Integrations routing other logging facilities into a TelegramConsole."""

from telegram_console.integrations.logging_handler import (
    TelegramLogHandler,
    install_logging_handler,
    uninstall_logging_handler,
)

__all__ = [
    "TelegramLogHandler",
    "install_logging_handler",
    "uninstall_logging_handler",
]
