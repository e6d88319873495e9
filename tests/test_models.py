"""Tests for LogRecord."""

from __future__ import annotations

import dataclasses
import threading

import pytest

from telegram_console.levels import LogLevel
from telegram_console.models import LogRecord

TS = "2025-12-04T10:48:37.123Z"


class TestLogRecord:
    """LogRecord is immutable and normalizes metadata."""

    def test_empty_metadata_becomes_none(self):
        record = LogRecord(LogLevel.INFO, "msg", TS, metadata={})

        assert record.metadata is None
        assert record.has_metadata is False

    def test_metadata_is_read_only_copy(self):
        source = {"a": 1}
        record = LogRecord(LogLevel.INFO, "msg", TS, metadata=source)
        source["a"] = 2

        assert record.metadata["a"] == 1
        with pytest.raises(TypeError):
            record.metadata["b"] = 3  # type: ignore[index]

    def test_fields_cannot_be_reassigned(self):
        record = LogRecord(LogLevel.INFO, "msg", TS)

        with pytest.raises(dataclasses.FrozenInstanceError):
            record.message = "changed"  # type: ignore[misc]

    def test_to_dict_omits_missing_metadata(self):
        record = LogRecord(LogLevel.WARN, "msg", TS)

        assert record.to_dict() == {"level": "warn", "message": "msg", "timestamp": TS}

    def test_to_dict_includes_metadata(self):
        record = LogRecord(LogLevel.ERROR, "msg", TS, metadata={"k": "v"})

        assert record.to_dict()["metadata"] == {"k": "v"}

    def test_nested_metadata_is_copied(self):
        # Arrange
        context = {"tags": ["a"], "user": {"id": 1}}
        record = LogRecord(LogLevel.INFO, "msg", TS, metadata=context)

        # Act
        context["tags"].append("b")
        context["user"]["id"] = 2

        # Assert
        assert record.metadata["tags"] == ["a"]
        assert record.metadata["user"] == {"id": 1}

    def test_uncopyable_values_are_kept_by_reference(self):
        lock = threading.Lock()

        record = LogRecord(LogLevel.INFO, "msg", TS, metadata={"lock": lock})

        assert record.metadata["lock"] is lock
