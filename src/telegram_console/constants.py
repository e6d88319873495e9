"""Application-wide constants for telegram-console.

Constants that define application behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_DIR",
    # Message bounds
    "MIN_LOG_LENGTH",
    "MAX_LOG_LENGTH",
    "DEFAULT_MAX_LOG_LENGTH",
    "TRUNCATION_MARKER",
    # Levels
    "DEFAULT_MIN_LOG_LEVEL",
    # Telegram transport
    "TELEGRAM_API_BASE_URL",
    "TELEGRAM_PARSE_MODE",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "MIN_HTTP_TIMEOUT_SECONDS",
    "MAX_HTTP_TIMEOUT_SECONDS",
    # Environment overrides
    "ENV_BOT_TOKEN",
    "ENV_CHAT_ID",
    # Logging integration
    "IGNORED_LOGGER_PREFIXES",
    # Lifecycle
    "BACKGROUND_LOOP_JOIN_TIMEOUT_SECONDS",
]

from platformdirs import user_config_dir

# ============================================================================
# Application Identity
# ============================================================================

# Application name used for logger names, config directory, User-Agent
APP_NAME: str = "telegram-console"

# Config file looked up by the CLI when --config is not given
CONFIG_FILENAME: str = "config.json"

# Platform-specific paths:
# - macOS: ~/Library/Application Support/telegram-console/
# - Linux: ~/.config/telegram-console/
# - Windows: %APPDATA%\telegram-console\
DEFAULT_CONFIG_DIR: str = user_config_dir(APP_NAME)

# ============================================================================
# Message Bounds
# ============================================================================

# Telegram rejects message texts longer than 4096 characters
MAX_LOG_LENGTH: int = 4096

# Anything shorter cannot hold a header plus a useful body
MIN_LOG_LENGTH: int = 32

# Half of Telegram's limit leaves room for the HTML envelope
DEFAULT_MAX_LOG_LENGTH: int = 2048

TRUNCATION_MARKER: str = "..."

# ============================================================================
# Levels
# ============================================================================

# Only errors are forwarded unless configured otherwise
DEFAULT_MIN_LOG_LEVEL: str = "error"

# ============================================================================
# Telegram Transport
# ============================================================================

TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
TELEGRAM_PARSE_MODE: str = "HTML"

# Per-request timeout for the Bot API call (seconds)
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 10.0
MIN_HTTP_TIMEOUT_SECONDS: float = 1.0
MAX_HTTP_TIMEOUT_SECONDS: float = 120.0

# ============================================================================
# Environment Overrides
# ============================================================================

ENV_BOT_TOKEN: str = "TELEGRAM_CONSOLE_BOT_TOKEN"
ENV_CHAT_ID: str = "TELEGRAM_CONSOLE_CHAT_ID"

# ============================================================================
# Logging Integration
# ============================================================================

# Records from these loggers are never forwarded. httpx logs every request at
# INFO, so forwarding it would feed each delivery back into the queue.
IGNORED_LOGGER_PREFIXES: tuple[str, ...] = (APP_NAME, "httpx", "httpcore")

# ============================================================================
# Lifecycle
# ============================================================================

BACKGROUND_LOOP_JOIN_TIMEOUT_SECONDS: float = 5.0
