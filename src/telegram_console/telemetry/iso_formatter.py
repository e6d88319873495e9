"""JSONL formatter with ISO 8601 timestamps for the system log file."""

from __future__ import annotations

__all__ = ["ISO8601Formatter"]

import json
import logging
from datetime import datetime, timezone

from telegram_console.formatting import iso_timestamp


class ISO8601Formatter(logging.Formatter):
    """Format records as one JSON object per line with a UTC timestamp.

    Format of "time": YYYY-MM-DDTHH:MM:SS.sssZ
    Example line: {"time": "2025-12-04T10:48:37.123Z", "level": "WARNING", "event": "delivery_failed"}
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = iso_timestamp(datetime.fromtimestamp(record.created, tz=timezone.utc))

        # Structured logging passes dicts; anything else becomes a message field
        if isinstance(record.msg, dict):
            log_data = record.msg
        else:
            log_data = {"message": record.getMessage()}

        log_entry = {"time": timestamp, "level": record.levelname, **log_data}
        return json.dumps(log_entry, default=str)
