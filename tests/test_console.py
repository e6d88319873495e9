"""Tests for TelegramConsole: filtering, formatting and lifecycle.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from telegram_console.config import TelegramConsoleConfig
from telegram_console.console import TelegramConsole
from telegram_console.delivery.transport import TelegramTransport
from telegram_console.levels import LogLevel


class TestLevelFilter:
    """Only records at or above min_log_level reach the transport."""

    async def test_warn_threshold_delivers_warn_then_error(self, transport):
        # Arrange
        console = TelegramConsole(transport, min_log_level="warn")

        # Act
        console.log("a")
        console.info("b")
        console.warn("c")
        console.error("d")
        await console.flush(timeout=5)

        # Assert
        assert [r.level for r in transport.delivered] == [LogLevel.WARN, LogLevel.ERROR]
        assert transport.delivered[0].message.endswith("\nc")
        assert transport.delivered[1].message.endswith("\nd")

    async def test_filtered_call_never_reaches_transport(self, transport):
        console = TelegramConsole(transport, min_log_level=LogLevel.ERROR)

        result = console.emit(LogLevel.INFO, "ignored")
        await console.flush(timeout=5)

        assert result is None
        assert transport.attempts == []
        assert console.stats.enqueued == 0

    def test_default_threshold_is_error(self, transport):
        assert TelegramConsole(transport).min_log_level is LogLevel.ERROR

    def test_warning_is_alias_of_warn(self):
        assert TelegramConsole.warning is TelegramConsole.warn

    def test_unknown_level_raises(self, transport):
        console = TelegramConsole(transport)

        with pytest.raises(ValueError):
            console.emit("verbose", "x")


class TestRecordBuilding:
    """emit() formats, truncates and timestamps records."""

    async def test_mixed_values(self, transport):
        # Arrange
        console = TelegramConsole(transport, min_log_level="log")

        # Act
        record = console.error("Payment failed:", ValueError("card declined"), {"order_id": 42})
        await console.flush(timeout=5)

        # Assert
        assert record is None  # error() is fire-and-forget
        delivered = transport.delivered[0]
        assert delivered.message.startswith(f"[ERROR] {delivered.timestamp}\n")
        assert "Payment failed: card declined" in delivered.message
        assert delivered.message.endswith("\n\nMetadata:\norder_id: 42")
        assert dict(delivered.metadata) == {"order_id": 42}

    async def test_emit_returns_queued_record(self, transport):
        console = TelegramConsole(transport, min_log_level="log")

        record = console.emit("info", "hello")
        await console.flush(timeout=5)

        assert record is not None
        assert transport.delivered == [record]
        assert record.metadata is None

    async def test_long_message_is_truncated(self, transport):
        # Arrange
        console = TelegramConsole(transport, min_log_level="log", max_log_length=100)

        # Act
        record = console.emit(LogLevel.LOG, "X" * 5000)
        await console.flush(timeout=5)

        # Assert
        assert len(record.message) == 100
        assert record.message.endswith("...")


class TestRuntimeConfiguration:
    """Knobs can change at runtime and apply to later calls only."""

    @pytest.mark.parametrize(("value", "expected"), [(10, 32), (10000, 4096), (500, 500)])
    def test_set_max_log_length_clamps(self, transport, value: int, expected: int):
        console = TelegramConsole(transport)

        console.set_max_log_length(value)

        assert console.max_log_length == expected

    def test_constructor_clamps_max_log_length(self, transport):
        assert TelegramConsole(transport, max_log_length=1).max_log_length == 32

    async def test_new_length_does_not_touch_queued_records(self, transport):
        # Arrange
        transport.blocked = True
        console = TelegramConsole(transport, min_log_level="log", max_log_length=4096)
        first = console.emit("log", "Y" * 200)

        # Act
        console.set_max_log_length(50)
        second = console.emit("log", "Y" * 200)
        transport.blocked = False
        await console.flush(timeout=5)

        # Assert
        assert len(first.message) > 200
        assert len(second.message) == 50
        assert transport.delivered == [first, second]

    async def test_set_min_log_level_accepts_names(self, transport):
        console = TelegramConsole(transport)

        console.set_min_log_level("info")
        console.info("now visible")
        await console.flush(timeout=5)

        assert console.min_log_level is LogLevel.INFO
        assert len(transport.delivered) == 1


class TestLifecycle:
    """flush/close behavior for sync and async programs."""

    def test_sync_close_delivers_pending_records(self, transport):
        # Arrange
        console = TelegramConsole(transport, min_log_level="log")
        console.info("from sync code")

        # Act
        drained = console.close(timeout=5)

        # Assert
        assert drained is True
        assert console.closed is True
        assert len(transport.delivered) == 1
        assert console.close() is True

    def test_sync_context_manager(self, transport):
        with TelegramConsole(transport) as console:
            console.error("boom")

        assert console.closed is True
        assert len(transport.delivered) == 1

    async def test_async_context_manager(self, transport):
        async with TelegramConsole(transport) as console:
            console.error("boom")

        assert console.closed is True
        assert console.pending == 0
        assert len(transport.delivered) == 1

    async def test_sync_close_inside_running_loop_raises(self, transport):
        console = TelegramConsole(transport)

        with pytest.raises(RuntimeError, match="aclose"):
            console.close()

        await console.aclose()

    def test_failures_are_counted_not_raised(self, fake_transport_cls):
        transport = fake_transport_cls(fail_on=lambda record: True)
        console = TelegramConsole(transport)

        console.error("will fail")
        console.error("will fail too")
        console.close(timeout=5)

        assert console.stats.failed == 2
        assert console.stats.delivered == 0


class TestFromConfig:
    """from_config wiring."""

    def test_creates_owned_telegram_transport(self, config: TelegramConsoleConfig):
        console = TelegramConsole.from_config(config)

        assert isinstance(console._transport, TelegramTransport)
        assert console.min_log_level is LogLevel.ERROR
        assert console.max_log_length == 2048
        assert console.close() is True

    def test_uses_injected_transport(self, config: TelegramConsoleConfig, transport):
        console = TelegramConsole.from_config(config, transport=transport)

        console.error("x")
        console.close(timeout=5)

        assert len(transport.delivered) == 1

    def test_intercept_logging_installs_and_removes_handler(self, transport):
        # Arrange
        config = TelegramConsoleConfig(bot_token="1:a", chat_id="1", intercept_logging=True)
        root = logging.getLogger()

        # Act
        console = TelegramConsole.from_config(config, transport=transport)
        installed = console._logging_handler

        # Assert
        assert installed in root.handlers
        console.close(timeout=5)
        assert installed not in root.handlers

    def test_system_log_path_configures_file(self, tmp_path, transport):
        config = TelegramConsoleConfig(
            bot_token="1:a",
            chat_id="1",
            system_log_path=str(tmp_path / "logs" / "system.jsonl"),
        )

        with patch("telegram_console.console.configure_system_logger_file") as configure:
            TelegramConsole.from_config(config, transport=transport).close()

        configure.assert_called_once_with(tmp_path / "logs" / "system.jsonl")
