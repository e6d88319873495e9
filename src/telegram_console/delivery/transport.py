"""Transport contract and Telegram Bot API implementation.

The delivery queue only knows the Transport protocol: one awaitable
deliver(record) call per record, raising on failure. Any object with that
method works (structural subtyping), which keeps the queue testable with
in-memory fakes.

TelegramTransport sends each record with the Bot API sendMessage method:

    POST {api_base_url}/bot{token}/sendMessage
    {"chat_id": ..., "text": <HTML envelope>, "parse_mode": "HTML", ...}

Timeouts are enforced here (httpx), never by the queue.
"""

from __future__ import annotations

__all__ = [
    "TelegramTransport",
    "Transport",
    "render_envelope",
]

import html
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from telegram_console import __version__
from telegram_console.config import redact_token
from telegram_console.constants import (
    APP_NAME,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    TELEGRAM_API_BASE_URL,
    TELEGRAM_PARSE_MODE,
)
from telegram_console.exceptions import DeliveryError

if TYPE_CHECKING:
    from telegram_console.config import TelegramConsoleConfig
    from telegram_console.models import LogRecord

# User-Agent header for Bot API calls (informational)
USER_AGENT = f"{APP_NAME}/{__version__}"


@runtime_checkable
class Transport(Protocol):
    """Delivers one formatted record to the remote sink.

    Contract:
    - Return normally on success, raise any exception on failure.
    - Called at most once per record, never concurrently by one queue.
    - May take arbitrarily long; a call that never returns stalls the queue.
    """

    async def deliver(self, record: "LogRecord") -> None:
        """Send one record."""
        ...


def render_envelope(record: "LogRecord") -> str:
    """Render the HTML text sent to Telegram for a record.

    The record message is escaped so log content cannot break the markup.
    """
    return (
        f"<b>{record.level.label}</b>\n"
        f"Time: {record.timestamp}\n"
        f"Message: {html.escape(record.message, quote=False)}"
    )


class TelegramTransport:
    """Transport posting records to a Telegram chat via the Bot API.

    Owns its httpx.AsyncClient unless one is injected. The client is created
    lazily on first delivery so it binds to the event loop that drains the
    queue.

    Usage:
        transport = TelegramTransport.from_config(config)
        await transport.deliver(record)
        await transport.aclose()
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        api_base_url: str = TELEGRAM_API_BASE_URL,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        disable_web_page_preview: bool = True,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            bot_token: Bot token from @BotFather.
            chat_id: Target chat id or @channel name.
            api_base_url: Bot API base URL.
            timeout_seconds: Per-request timeout.
            disable_web_page_preview: Suppress link previews.
            http_client: Optional client (for testing); not closed by aclose().
        """
        if not bot_token:
            raise ValueError("bot_token must not be empty")
        if not chat_id:
            raise ValueError("chat_id must not be empty")

        self._bot_token = bot_token
        self._chat_id = chat_id
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._disable_web_page_preview = disable_web_page_preview
        self._client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_config(
        cls,
        config: "TelegramConsoleConfig",
        http_client: httpx.AsyncClient | None = None,
    ) -> "TelegramTransport":
        return cls(
            config.bot_token,
            config.chat_id,
            api_base_url=config.api_base_url,
            timeout_seconds=config.timeout_seconds,
            disable_web_page_preview=config.disable_web_page_preview,
            http_client=http_client,
        )

    @property
    def chat_id(self) -> str:
        return self._chat_id

    @property
    def endpoint(self) -> str:
        """sendMessage URL. Contains the bot token: never log it."""
        return f"{self._api_base_url}/bot{self._bot_token}/sendMessage"

    def build_payload(self, record: "LogRecord") -> dict[str, Any]:
        """Build the sendMessage JSON body for a record."""
        return {
            "chat_id": self._chat_id,
            "text": render_envelope(record),
            "parse_mode": TELEGRAM_PARSE_MODE,
            "disable_web_page_preview": self._disable_web_page_preview,
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_seconds,
                headers={"User-Agent": USER_AGENT},
            )
        return self._client

    def _scrub(self, text: str) -> str:
        # httpx error messages may echo the request URL, which embeds the token
        return text.replace(self._bot_token, redact_token(self._bot_token))

    async def deliver(self, record: "LogRecord") -> None:
        """Send one record with sendMessage.

        Raises:
            DeliveryError: On network errors, timeouts, non-2xx responses,
                or a response body with "ok": false.
        """
        client = self._get_client()

        try:
            response = await client.post(self.endpoint, json=self.build_payload(record))
        except httpx.TimeoutException as e:
            raise DeliveryError(
                f"Timed out after {self._timeout_seconds}s sending to Telegram: {self._scrub(str(e))}"
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(
                f"HTTP error sending to Telegram: {type(e).__name__}: {self._scrub(str(e))}"
            ) from e

        body: Any = None
        try:
            body = response.json()
        except ValueError:
            pass

        description: str | None = None
        ok_flag: Any = None
        if isinstance(body, dict):
            description = body.get("description")
            ok_flag = body.get("ok")

        if response.is_success and ok_flag is not False:
            return

        reason = description or f"HTTP {response.status_code}"
        raise DeliveryError(
            f"Telegram API rejected message: {reason}",
            status_code=response.status_code,
            description=description,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def __repr__(self) -> str:
        return (
            f"TelegramTransport(bot={redact_token(self._bot_token)!r}, "
            f"chat_id={self._chat_id!r}, api_base_url={self._api_base_url!r})"
        )
