"""Shared helpers for CLI commands."""

from __future__ import annotations

__all__ = [
    "ConfigurationClickError",
    "config_option",
    "load_config_or_fail",
]

from pathlib import Path
from typing import Any, Callable

import click

from telegram_console.config import TelegramConsoleConfig, load_config
from telegram_console.exceptions import ConfigurationError


class ConfigurationClickError(click.ClickException):
    """ClickException carrying ConfigurationError's exit code."""

    exit_code = ConfigurationError.exit_code


def config_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the shared --config/-c option."""
    return click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(path_type=Path, dir_okay=False),
        default=None,
        help="Config file (default: OS config dir). Env vars override token/chat id.",
    )(func)


def load_config_or_fail(config_path: Path | None) -> TelegramConsoleConfig:
    """Load configuration, converting errors into a CLI error (exit 2)."""
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        raise ConfigurationClickError(str(e)) from e
