"""Shared utilities for telegram-console.

Import directly from submodules:
    from telegram_console.utils.file_helpers import load_validated_json
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
