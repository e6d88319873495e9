"""Tests for the system logger and its formatters."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from telegram_console.telemetry.iso_formatter import ISO8601Formatter
from telegram_console.telemetry.system_logger import (
    ConsoleFormatter,
    configure_system_logger_file,
    get_system_logger,
)


def make_log_record(msg, level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord("telegram-console.system", level, __file__, 1, msg, None, None)


class TestGetSystemLogger:
    def test_is_singleton(self):
        assert get_system_logger() is get_system_logger()

    def test_does_not_propagate(self):
        logger = get_system_logger()

        assert logger.name == "telegram-console.system"
        assert logger.propagate is False

    def test_warnings_go_to_stderr(self, capsys):
        get_system_logger().warning({"event": "delivery_failed", "message": "Failed to deliver"})

        assert "WARNING: Failed to deliver" in capsys.readouterr().err

    def test_info_is_not_printed(self, capsys):
        get_system_logger().info({"event": "logging_handler_installed"})

        assert capsys.readouterr().err == ""


class TestConfigureFile:
    def test_writes_jsonl(self, tmp_path: Path):
        # Arrange
        log_path = tmp_path / "logs" / "system.jsonl"
        configure_system_logger_file(log_path)

        # Act
        get_system_logger().warning({"event": "delivery_failed", "status_code": 400})
        for handler in get_system_logger().handlers:
            handler.flush()

        # Assert
        entry = json.loads(log_path.read_text().strip())
        assert entry["event"] == "delivery_failed"
        assert entry["level"] == "WARNING"
        assert entry["status_code"] == 400

    def test_is_idempotent(self, tmp_path: Path):
        configure_system_logger_file(tmp_path / "a.jsonl")
        configure_system_logger_file(tmp_path / "b.jsonl")

        file_handlers = [h for h in get_system_logger().handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert not (tmp_path / "b.jsonl").exists()


class TestFormatters:
    def test_console_formatter_prefers_message(self):
        record = make_log_record({"event": "delivery_failed", "message": "Failed"})

        assert ConsoleFormatter().format(record) == "WARNING: Failed"

    def test_console_formatter_falls_back_to_event(self):
        record = make_log_record({"event": "delivery_failed"})

        assert ConsoleFormatter().format(record) == "WARNING: delivery_failed"

    def test_iso_formatter_wraps_plain_messages(self):
        line = ISO8601Formatter().format(make_log_record("plain text"))

        entry = json.loads(line)
        assert entry["message"] == "plain text"
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", entry["time"])
