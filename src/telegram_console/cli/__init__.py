"""Command-line interface for telegram-console.

Provides commands for checking configuration and sending one-off messages.
"""

from .main import cli, main

__all__ = ["cli", "main"]
