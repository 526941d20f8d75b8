"""Chat-bot surface: command handling and development polling."""

from modules.telegram.commands import BotCommandHandler
from modules.telegram.polling import TelegramPoller

__all__ = ["BotCommandHandler", "TelegramPoller"]
