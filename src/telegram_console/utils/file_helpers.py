"""File utilities for loading and saving configuration.

Provides:
- get_config_dir / get_config_path: OS-appropriate config location
- require_file_exists: FileNotFoundError with a helpful hint
- load_validated_json: JSON parsing + Pydantic validation with readable errors
- set_secure_permissions: owner-only permissions (config holds a bot token)
"""

from __future__ import annotations

__all__ = [
    "get_config_dir",
    "get_config_path",
    "load_validated_json",
    "require_file_exists",
    "set_secure_permissions",
]

import json
import sys
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from telegram_console.constants import APP_NAME, CONFIG_FILENAME, DEFAULT_CONFIG_DIR

# Type variable for Pydantic models
T = TypeVar("T", bound=BaseModel)


def get_config_dir() -> Path:
    """Get the OS-appropriate configuration directory.

    Returns:
        Path such as ~/.config/telegram-console on Linux.
    """
    return Path(DEFAULT_CONFIG_DIR)


def get_config_path() -> Path:
    """Get the default config file path used when --config is not given."""
    return get_config_dir() / CONFIG_FILENAME


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Restrict a file (0o600) or directory (0o700) to its owner.

    Skipped on Windows. Failures are ignored: some filesystems do not
    support chmod.
    """
    if sys.platform == "win32":
        return
    try:
        path.chmod(0o700 if is_directory else 0o600)
    except OSError:
        pass


def require_file_exists(
    file_path: Path,
    file_type: str = "file",
    init_hint: bool = True,
) -> None:
    """Raise FileNotFoundError with helpful message if file doesn't exist.

    Args:
        file_path: Path to check.
        file_type: Description for error message (e.g., "configuration").
        init_hint: If True, suggest where the file is expected.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if file_path.exists():
        return

    hint = (
        f"\nCreate it or pass --config; {APP_NAME} looks for {get_config_path()} by default."
        if init_hint
        else ""
    )
    raise FileNotFoundError(f"{file_type.capitalize()} file not found at {file_path}.{hint}")


def load_validated_json(
    file_path: Path,
    model_class: type[T],
    file_type: str = "file",
    recovery_hint: str | None = None,
    overrides: dict[str, object] | None = None,
) -> T:
    """Load JSON file and validate against Pydantic model.

    Combines file reading, JSON parsing, and Pydantic validation with
    consistent error messages.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class to validate against.
        file_type: Description for error messages (e.g., "config").
        recovery_hint: Optional hint appended to validation errors.
        overrides: Top-level keys that replace values read from the file.

    Returns:
        Validated Pydantic model instance.

    Raises:
        ValueError: If JSON is invalid or validation fails.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid {file_type} file {file_path}: expected a JSON object")

    if overrides:
        data.update(overrides)

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"]) or "(root)"
            errors.append(f"  - {loc}: {error['msg']}")

        hint = f"\n\n{recovery_hint}" if recovery_hint else ""
        raise ValueError(f"Invalid {file_type} file {file_path}:\n" + "\n".join(errors) + hint) from e
