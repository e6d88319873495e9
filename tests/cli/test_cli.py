"""Unit tests for CLI commands.

Tests CLI behavior using Click's CliRunner for isolated, fast testing.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from telegram_console import __version__
from telegram_console.cli import cli
from telegram_console.delivery.transport import TelegramTransport
from telegram_console.levels import LogLevel
from telegram_console.utils.file_helpers import get_config_path


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a valid config file and return its path."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bot_token": "123456:secret-token", "chat_id": "-100200300"}))
    return path


@pytest.fixture
def patched_transport(transport) -> Iterator:
    """Route TelegramTransport.from_config to the in-memory transport."""
    with patch.object(TelegramTransport, "from_config", return_value=transport):
        yield transport


class TestVersion:
    """Tests for --version flag."""

    def test_version_flag_shows_version(self, runner: CliRunner) -> None:
        """Given --version flag, returns version string."""
        # Act
        result = runner.invoke(cli, ["--version"])

        # Assert
        assert result.exit_code == 0
        assert f"telegram-console {__version__}" in result.output

    def test_no_command_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "send" in result.output
        assert "config" in result.output


class TestSend:
    """Tests for the send command."""

    def test_sends_message_and_reports_success(self, runner, config_file, patched_transport) -> None:
        # Act
        result = runner.invoke(cli, ["send", "--config", str(config_file), "Deploy", "finished"])

        # Assert
        assert result.exit_code == 0, result.output
        assert "Delivered info message" in result.output
        assert len(patched_transport.delivered) == 1
        assert "Deploy finished" in patched_transport.delivered[0].message

    def test_level_below_config_threshold_is_still_sent(self, runner, config_file, patched_transport) -> None:
        # Config threshold defaults to error
        result = runner.invoke(cli, ["send", "-c", str(config_file), "--level", "log", "hello"])

        assert result.exit_code == 0, result.output
        assert patched_transport.delivered[0].level is LogLevel.LOG

    def test_delivery_failure_exits_1(self, runner, config_file, fake_transport_cls) -> None:
        failing = fake_transport_cls(fail_on=lambda record: True)

        with patch.object(TelegramTransport, "from_config", return_value=failing):
            result = runner.invoke(cli, ["send", "-c", str(config_file), "boom"])

        assert result.exit_code == 1
        assert "Delivery failed" in result.output

    def test_invalid_level_is_rejected(self, runner, config_file) -> None:
        result = runner.invoke(cli, ["send", "-c", str(config_file), "--level", "verbose", "x"])

        assert result.exit_code == 2

    def test_missing_config_exits_2(self, runner, tmp_path) -> None:
        result = runner.invoke(cli, ["send", "-c", str(tmp_path / "missing.json"), "x"])

        assert result.exit_code == 2
        assert "not found" in result.output

    def test_requires_message(self, runner, config_file) -> None:
        result = runner.invoke(cli, ["send", "-c", str(config_file)])

        assert result.exit_code == 2


class TestConfigCommands:
    """Tests for the config command group."""

    def test_validate_valid_config(self, runner, config_file) -> None:
        result = runner.invoke(cli, ["config", "validate", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_validate_invalid_config(self, runner, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"bot_token": "1:a"}))

        result = runner.invoke(cli, ["config", "validate", "-c", str(path)])

        assert result.exit_code == 2
        assert "chat_id" in result.output

    def test_show_masks_token(self, runner, config_file) -> None:
        result = runner.invoke(cli, ["config", "show", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "123456:***" in result.output
        assert "secret-token" not in result.output

    def test_show_json(self, runner, config_file) -> None:
        result = runner.invoke(cli, ["config", "show", "-c", str(config_file), "--json"])

        data = json.loads(result.output)
        assert data["bot_token"] == "123456:***"
        assert data["chat_id"] == "-100200300"
        assert data["min_log_level"] == "error"

    def test_env_overrides_chat_id(self, runner, config_file) -> None:
        result = runner.invoke(
            cli,
            ["config", "show", "-c", str(config_file), "--json"],
            env={"TELEGRAM_CONSOLE_CHAT_ID": "@alerts"},
        )

        assert json.loads(result.output)["chat_id"] == "@alerts"

    def test_path(self, runner) -> None:
        result = runner.invoke(cli, ["config", "path"])

        assert result.output.strip() == str(get_config_path())
