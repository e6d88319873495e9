"""Formatting and truncation of log messages.

Pure functions only: no state, no I/O. The ingest API calls them in order:

1. split_values(): classify raw call arguments into text and metadata
2. format_message(): build the "[LEVEL] <timestamp>" header, body and
   optional metadata section
3. truncate(): enforce the configured maximum length

Classification is explicit (classify_value) so it can be tested without
the queue.
"""

from __future__ import annotations

__all__ = [
    "ValueKind",
    "classify_value",
    "clamp_max_log_length",
    "format_message",
    "iso_timestamp",
    "serialize_value",
    "split_values",
    "to_text",
    "truncate",
]

import dataclasses
import json
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from telegram_console.constants import MAX_LOG_LENGTH, MIN_LOG_LENGTH, TRUNCATION_MARKER
from telegram_console.levels import LogLevel


class ValueKind(str, Enum):
    """How a raw argument contributes to a record."""

    TEXT = "text"
    METADATA = "metadata"
    ERROR = "error"


# =============================================================================
# Timestamps
# =============================================================================


def iso_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO 8601 UTC timestamp with milliseconds.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: 2025-12-04T10:48:37.123Z

    Args:
        moment: Time to format. Defaults to now. Naive datetimes are
            treated as UTC.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Value classification
# =============================================================================


def classify_value(value: Any) -> ValueKind:
    """Classify one call argument.

    - Exception instances are ERROR: only their message is kept.
    - Mappings, dataclass instances and pydantic models are METADATA:
      their fields are merged by key.
    - Everything else (strings, numbers, None, lists, arbitrary objects)
      is TEXT.
    """
    if isinstance(value, BaseException):
        return ValueKind.ERROR
    if isinstance(value, (Mapping, BaseModel)):
        return ValueKind.METADATA
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return ValueKind.METADATA
    return ValueKind.TEXT


def to_text(value: Any) -> str:
    """Stringify a value without ever raising.

    Falls back to repr(), then to a placeholder naming the type.
    """
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except Exception:
        pass
    try:
        return repr(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _error_text(exc: BaseException) -> str:
    text = to_text(exc)
    return text if text else type(exc).__name__


def _metadata_items(value: Any) -> Iterable[tuple[str, Any]]:
    if isinstance(value, BaseModel):
        data: Mapping[Any, Any] = value.model_dump(mode="json")
    elif isinstance(value, Mapping):
        data = value
    else:
        data = dataclasses.asdict(value)
    for key, item in data.items():
        yield to_text(key), item


def split_values(values: Iterable[Any]) -> tuple[str, dict[str, Any]]:
    """Split raw call arguments into a text body and a metadata mapping.

    Text fragments (stringified values and exception messages) are joined
    with single spaces in argument order. Metadata keys keep the position
    of their first appearance; later values for the same key win.

    Args:
        values: Arguments as passed to log()/info()/warn()/error().

    Returns:
        Tuple of (text, metadata). metadata is empty when no structured
        values were passed.
    """
    parts: list[str] = []
    metadata: dict[str, Any] = {}

    for value in values:
        kind = classify_value(value)
        if kind is ValueKind.ERROR:
            parts.append(_error_text(value))
        elif kind is ValueKind.METADATA:
            try:
                metadata.update(_metadata_items(value))
            except Exception:
                # Unreadable object: keep what it prints as instead
                parts.append(to_text(value))
        else:
            parts.append(to_text(value))

    return " ".join(parts), metadata


# =============================================================================
# Formatting
# =============================================================================


def serialize_value(value: Any) -> str:
    """Render a metadata value as compact JSON.

    Objects JSON cannot encode are stringified; values that still fail
    (circular references) fall back to their text form.
    """
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=to_text)
    except (TypeError, ValueError):
        return to_text(value)


def format_message(
    level: LogLevel,
    text: str,
    metadata: Mapping[str, Any] | None,
    timestamp: str,
) -> str:
    """Build the full text block for a record.

    Layout:
        [LEVEL] <timestamp>
        <text>

        Metadata:
        key: <json>

    The metadata section is present only when metadata is non-empty.
    """
    formatted = f"[{level.label}] {timestamp}\n{text}"

    if metadata:
        lines = [f"{key}: {serialize_value(value)}" for key, value in metadata.items()]
        formatted += "\n\nMetadata:\n" + "\n".join(lines)

    return formatted


# =============================================================================
# Truncation
# =============================================================================


def clamp_max_log_length(length: int) -> int:
    """Clamp a maximum message length into [MIN_LOG_LENGTH, MAX_LOG_LENGTH]."""
    return max(MIN_LOG_LENGTH, min(int(length), MAX_LOG_LENGTH))


def truncate(formatted: str, max_length: int) -> str:
    """Cut a formatted message down to max_length characters.

    Longer messages keep their first max_length - 3 characters followed by
    "...", so the result is exactly max_length long. The whole block is
    cut, which can drop the metadata section or part of the header.
    """
    if len(formatted) <= max_length:
        return formatted
    keep = max(max_length - len(TRUNCATION_MARKER), 0)
    return formatted[:keep] + TRUNCATION_MARKER
