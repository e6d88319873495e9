"""telegram-console: ordered delivery of application logs to a Telegram chat.

Usage:
    from telegram_console import TelegramConsole, TelegramConsoleConfig

    config = TelegramConsoleConfig(bot_token="123:abc", chat_id="-100200300")
    console = TelegramConsole.from_config(config)
    console.error("Payment failed", exc, {"order_id": 42})
"""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = [
    "LogLevel",
    "LogRecord",
    "TelegramConsole",
    "TelegramConsoleConfig",
    "TelegramLogHandler",
    "TelegramTransport",
    "Transport",
    "__version__",
]

from telegram_console.config import TelegramConsoleConfig
from telegram_console.console import TelegramConsole
from telegram_console.delivery.transport import TelegramTransport, Transport
from telegram_console.integrations.logging_handler import TelegramLogHandler
from telegram_console.levels import LogLevel
from telegram_console.models import LogRecord
