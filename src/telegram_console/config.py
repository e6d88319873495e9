"""Application configuration for telegram-console.

Defines the configuration model for the Telegram destination, filtering and
message bounds. Config is a JSON file (default location from
get_config_path()), optionally overridden by environment variables.

Example usage:
    # Load from config file (env overrides applied)
    config = load_config(config_path)

    # Build in code
    config = TelegramConsoleConfig(bot_token="123:abc", chat_id="-100200300")

    # Save configuration
    config.save_to_file(config_path)
"""

from __future__ import annotations

__all__ = [
    "TelegramConsoleConfig",
    "env_overrides",
    "load_config",
    "redact_token",
]

import json
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator

from telegram_console.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_MAX_LOG_LENGTH,
    DEFAULT_MIN_LOG_LEVEL,
    ENV_BOT_TOKEN,
    ENV_CHAT_ID,
    MAX_HTTP_TIMEOUT_SECONDS,
    MIN_HTTP_TIMEOUT_SECONDS,
    TELEGRAM_API_BASE_URL,
)
from telegram_console.exceptions import ConfigurationError
from telegram_console.formatting import clamp_max_log_length
from telegram_console.levels import LogLevel, parse_level
from telegram_console.utils.file_helpers import (
    get_config_path,
    load_validated_json,
    require_file_exists,
    set_secure_permissions,
)


def redact_token(token: str) -> str:
    """Mask a bot token for display, keeping the bot id part.

    "123456:ABC-secret" -> "123456:***"
    """
    bot_id, sep, _ = token.partition(":")
    if sep:
        return f"{bot_id}:***"
    return "***"


class TelegramConsoleConfig(BaseModel):
    """Configuration for a TelegramConsole.

    Immutable once built. min_log_level and max_log_length are only the
    initial values: the console copies them and exposes setters for
    runtime changes.

    Attributes:
        bot_token: Telegram bot token from @BotFather. Never logged.
        chat_id: Target chat, channel (@name) or numeric id.
        min_log_level: Records below this level are dropped (default: error).
        max_log_length: Maximum characters per message. Out-of-range values
            are clamped to 32-4096, never rejected.
        intercept_logging: Install a handler on the root logger so stdlib
            logging calls are forwarded too.
        api_base_url: Bot API base URL (override for self-hosted Bot API).
        timeout_seconds: Per-request HTTP timeout (1-120).
        disable_web_page_preview: Suppress link previews in delivered messages.
        system_log_path: Optional JSONL file for the package's own warnings
            and errors (delivery failures).
    """

    bot_token: str = Field(min_length=1, repr=False)
    chat_id: str = Field(min_length=1)
    min_log_level: LogLevel = LogLevel(DEFAULT_MIN_LOG_LEVEL)
    max_log_length: int = DEFAULT_MAX_LOG_LENGTH
    intercept_logging: bool = False
    api_base_url: str = Field(default=TELEGRAM_API_BASE_URL, pattern=r"^https?://")
    timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        ge=MIN_HTTP_TIMEOUT_SECONDS,
        le=MAX_HTTP_TIMEOUT_SECONDS,
    )
    disable_web_page_preview: bool = True
    system_log_path: str | None = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("chat_id", mode="before")
    @classmethod
    def _coerce_chat_id(cls, value: Any) -> Any:
        # Numeric ids are common in hand-written JSON
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("min_log_level", mode="before")
    @classmethod
    def _parse_min_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_level(value)
        return value

    @field_validator("max_log_length")
    @classmethod
    def _clamp_max_log_length(cls, value: int) -> int:
        return clamp_max_log_length(value)

    def redacted_dict(self) -> dict[str, Any]:
        """Dump for display with the bot token masked."""
        data = self.model_dump(mode="json")
        data["bot_token"] = redact_token(self.bot_token)
        return data

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file.

        Creates parent directories if they don't exist. The file holds the
        bot token, so directory and file are restricted to the owner.

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)
        set_secure_permissions(config_path.parent, is_directory=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
            f.write("\n")

        set_secure_permissions(config_path)

    @classmethod
    def load_from_file(
        cls,
        config_path: Path,
        overrides: Mapping[str, Any] | None = None,
    ) -> "TelegramConsoleConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.
            overrides: Values replacing those read from the file.

        Returns:
            TelegramConsoleConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config file is invalid or missing required fields.
        """
        require_file_exists(config_path, file_type="configuration")
        return load_validated_json(
            config_path,
            cls,
            file_type="config",
            recovery_hint="Fix the file or set "
            f"{ENV_BOT_TOKEN} / {ENV_CHAT_ID} in the environment.",
            overrides=dict(overrides) if overrides else None,
        )


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect config values set through environment variables.

    Empty variables are ignored.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    if env.get(ENV_BOT_TOKEN):
        overrides["bot_token"] = env[ENV_BOT_TOKEN]
    if env.get(ENV_CHAT_ID):
        overrides["chat_id"] = env[ENV_CHAT_ID]
    return overrides


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> TelegramConsoleConfig:
    """Resolve configuration from file and environment.

    Resolution order:
    1. Explicit config_path, else the default path if that file exists
    2. Environment variables override bot_token / chat_id
    3. Without any file, environment variables alone must provide both

    Args:
        config_path: Config file path, or None for the default location.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If no usable configuration can be built.
    """
    overrides = env_overrides(environ)
    path = config_path if config_path is not None else get_config_path()

    try:
        if config_path is not None or path.exists():
            return TelegramConsoleConfig.load_from_file(path, overrides)
        if {"bot_token", "chat_id"} <= overrides.keys():
            return TelegramConsoleConfig.model_validate(overrides)
        require_file_exists(path, file_type="configuration")
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e

    # require_file_exists always raises when the file is missing
    raise ConfigurationError(f"Configuration file not found at {path}")
