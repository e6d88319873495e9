"""Ordered delivery of log records to a remote chat.

- queue: DeliveryQueue, the FIFO buffer and its single-flight drain loop
- transport: Transport protocol and the Telegram Bot API implementation
- background_loop: private event loop used when producers have none
"""

from telegram_console.delivery.queue import DeliveryQueue, QueueStats
from telegram_console.delivery.transport import TelegramTransport, Transport

__all__ = [
    "DeliveryQueue",
    "QueueStats",
    "TelegramTransport",
    "Transport",
]
