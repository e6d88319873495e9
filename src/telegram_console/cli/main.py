"""Main CLI entry point for telegram-console.

Defines the CLI group and registers all subcommands.

Commands:
    config  - Configuration inspection (path, show, validate)
    send    - Send one message to the configured chat
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys

import click

from telegram_console import __version__

from .commands.config import config
from .commands.send import send


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """telegram-console: forward application logs to a Telegram chat."""
    if version:
        click.echo(f"telegram-console {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(config)
cli.add_command(send)


def main() -> None:
    """CLI entry point."""
    cli()
