"""Data model for records moving through the delivery pipeline."""

from __future__ import annotations

__all__ = ["LogRecord"]

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from telegram_console.levels import LogLevel


def _snapshot(metadata: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(metadata)
    try:
        return copy.deepcopy(data)
    except Exception:
        # Locks, sockets and the like
        return data


@dataclass(frozen=True, slots=True)
class LogRecord:
    """One log event, finalized and ready for transport.

    Built once at ingest time (after filtering, formatting and truncation)
    and never modified afterwards. The queue only ever removes records.

    Attributes:
        level: Severity of the event.
        message: Formatted and truncated text, at most max_log_length chars.
        timestamp: Capture time, ISO 8601 UTC with milliseconds
            (2025-12-04T10:48:37.123Z). Independent of delivery latency.
        metadata: Structured context supplied with the call, or None when
            there was none. Never an empty mapping. Deep-copied at creation;
            values that cannot be copied are kept by reference.
    """

    level: LogLevel
    message: str
    timestamp: str
    metadata: Mapping[str, Any] | None = field(default=None)

    def __post_init__(self) -> None:
        # Empty metadata collapses to None; non-empty is frozen behind a read-only view
        if not self.metadata:
            object.__setattr__(self, "metadata", None)
        else:
            object.__setattr__(self, "metadata", MappingProxyType(_snapshot(self.metadata)))

    @property
    def has_metadata(self) -> bool:
        return self.metadata is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict (metadata key omitted when absent)."""
        data: dict[str, Any] = {
            "level": self.level.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data
