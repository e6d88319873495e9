"""Send command: deliver one message through the full pipeline.

Useful to check a bot token and chat id before wiring the console into an
application. The minimum level from the config is ignored; the message is
always sent.
"""

from __future__ import annotations

__all__ = ["send"]

import sys
from pathlib import Path

import click

from telegram_console.console import TelegramConsole
from telegram_console.levels import LogLevel

from ..helpers import config_option, load_config_or_fail
from ..styling import style_error, style_success

# Seconds to wait for delivery before giving up
_DEFAULT_SEND_TIMEOUT_SECONDS = 30.0


@click.command()
@click.argument("message", nargs=-1, required=True)
@click.option(
    "--level",
    "-l",
    type=click.Choice([level.value for level in LogLevel]),
    default=LogLevel.INFO.value,
    show_default=True,
    help="Level shown in the message header",
)
@click.option(
    "--timeout",
    type=float,
    default=_DEFAULT_SEND_TIMEOUT_SECONDS,
    show_default=True,
    help="Seconds to wait for delivery",
)
@config_option
def send(message: tuple[str, ...], level: str, timeout: float, config_path: Path | None) -> None:
    """Send MESSAGE to the configured chat and wait for delivery.

    \b
    Examples:
      telegram-console send "Deploy finished"
      telegram-console send --level error "Backup job failed"
    """
    config = load_config_or_fail(config_path)
    config = config.model_copy(update={"min_log_level": LogLevel.LOG, "intercept_logging": False})

    console = TelegramConsole.from_config(config)
    record = console.emit(level, *message)
    drained = console.close(timeout=timeout)

    if not drained:
        click.echo(style_error(f"Delivery did not finish within {timeout}s"), err=True)
        sys.exit(1)
    if console.stats.failed:
        click.echo(style_error("Delivery failed (see warning above)"), err=True)
        sys.exit(1)

    length = len(record.message) if record is not None else 0
    click.echo(style_success(f"Delivered {level} message ({length} chars) to chat {config.chat_id}"))
