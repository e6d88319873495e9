"""Custom exceptions for telegram-console.

This module contains all custom exceptions used throughout the package.

Configuration errors (raised to the caller):
    - ConfigurationError: Config file missing, unreadable or invalid

Delivery errors (never reach the caller of the ingest API):
    - DeliveryError: Transport could not hand a record to Telegram.
      Raised by transports, caught and reported by the drain loop.

Usage:
    from telegram_console.exceptions import ConfigurationError, DeliveryError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "TelegramConsoleError",
]


class TelegramConsoleError(Exception):
    """Base exception for all telegram-console errors."""


class ConfigurationError(TelegramConsoleError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    - Required values (bot token, chat id) are missing after env overrides

    The CLI maps this to exit code 2.
    """

    exit_code = 2


class DeliveryError(TelegramConsoleError):
    """A record could not be delivered to the remote chat.

    Attributes:
        message: Human-readable failure reason.
        status_code: HTTP status code, if a response was received.
        description: Telegram's error description, if the API returned one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.description = description

    def __repr__(self) -> str:
        parts = [f"DeliveryError({self.message!r}"]
        if self.status_code is not None:
            parts.append(f", status_code={self.status_code!r}")
        if self.description is not None:
            parts.append(f", description={self.description!r}")
        parts.append(")")
        return "".join(parts)

    def __str__(self) -> str:
        return self.message
