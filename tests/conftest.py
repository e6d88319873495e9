"""Shared fixtures for telegram-console tests."""

from __future__ import annotations

import asyncio
from typing import Callable, Iterator

import pytest

from telegram_console.config import TelegramConsoleConfig
from telegram_console.exceptions import DeliveryError
from telegram_console.levels import LogLevel
from telegram_console.models import LogRecord
from telegram_console.telemetry.system_logger import reset_system_logger


class FakeTransport:
    """In-memory Transport recording every call.

    Attributes:
        attempts: Records passed to deliver(), in call order.
        delivered: Records that were accepted.
        max_in_flight: Highest number of overlapping deliver() calls seen.
    """

    def __init__(
        self,
        *,
        delay: float = 0.0,
        fail_on: Callable[[LogRecord], bool] | None = None,
    ) -> None:
        self.delay = delay
        self.fail_on = fail_on
        self.attempts: list[LogRecord] = []
        self.delivered: list[LogRecord] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.blocked = False

    async def deliver(self, record: LogRecord) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.attempts.append(record)
            while self.blocked:
                await asyncio.sleep(0.01)
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_on is not None and self.fail_on(record):
                raise DeliveryError(f"rejected {record.message}", status_code=400, description="Bad Request")
            self.delivered.append(record)
        finally:
            self.in_flight -= 1

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.delivered]


def _make_record(message: str, level: LogLevel = LogLevel.INFO) -> LogRecord:
    return LogRecord(level=level, message=message, timestamp="2025-12-04T10:48:37.123Z")


@pytest.fixture(autouse=True)
def fresh_system_logger() -> Iterator[None]:
    """Give each test its own system logger handlers."""
    reset_system_logger()
    yield
    reset_system_logger()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config() -> TelegramConsoleConfig:
    """Minimal valid configuration."""
    return TelegramConsoleConfig(bot_token="123456:secret-token", chat_id="-100200300")


@pytest.fixture
def fake_transport_cls() -> type[FakeTransport]:
    """FakeTransport class, for tests needing custom delay or failures."""
    return FakeTransport


@pytest.fixture
def make_record() -> Callable[..., LogRecord]:
    """Factory building records without going through the formatter."""
    return _make_record
