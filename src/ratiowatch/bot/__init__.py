"""Telegram delivery module."""

from ratiowatch.core.config import TelegramConfig

from .telegram_bot import TelegramNotifier

__all__ = [
    "TelegramNotifier",
    "TelegramConfig",
]
