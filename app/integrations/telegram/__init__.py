"""Telegram Bot API gateway."""

from .client import ALLOWED_UPDATES, TelegramClient

__all__ = ["ALLOWED_UPDATES", "TelegramClient"]
