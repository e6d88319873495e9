"""Config command group for telegram-console CLI.

Provides configuration inspection subcommands.
"""

from __future__ import annotations

__all__ = ["config"]

import json
from pathlib import Path

import click

from telegram_console.utils.file_helpers import get_config_path

from ..helpers import config_option, load_config_or_fail
from ..styling import style_header, style_label, style_success


@click.group()
def config() -> None:
    """Configuration management commands.

    \b
    Environment overrides:
      TELEGRAM_CONSOLE_BOT_TOKEN   bot token
      TELEGRAM_CONSOLE_CHAT_ID     chat id
    """
    pass


@config.command("path")
def config_path_cmd() -> None:
    """Show the default config file path."""
    click.echo(str(get_config_path()))


@config.command("validate")
@config_option
def config_validate(config_path: Path | None) -> None:
    """Check that the configuration loads and validates."""
    load_config_or_fail(config_path)
    click.echo(style_success("Configuration is valid"))


@config.command("show")
@config_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(config_path: Path | None, as_json: bool) -> None:
    """Display the resolved configuration (bot token masked)."""
    loaded = load_config_or_fail(config_path)
    data = loaded.redacted_dict()

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(style_header("Telegram"))
    click.echo(f"  {style_label('bot_token')} {data['bot_token']}")
    click.echo(f"  {style_label('chat_id')} {data['chat_id']}")
    click.echo(f"  {style_label('api_base_url')} {data['api_base_url']}")
    click.echo(f"  {style_label('timeout_seconds')} {data['timeout_seconds']}")
    click.echo()
    click.echo(style_header("Filtering"))
    click.echo(f"  {style_label('min_log_level')} {data['min_log_level']}")
    click.echo(f"  {style_label('max_log_length')} {data['max_log_length']}")
    click.echo(f"  {style_label('intercept_logging')} {data['intercept_logging']}")
