"""Telegram Bot API integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class TelegramSettings(IntegrationSettings):
    """Telegram Bot API configuration.

    Environment Variables:
        TELEGRAM_BOT_TOKEN: Bot token issued by BotFather
        TELEGRAM_API_URL: Bot API base URL (default: https://api.telegram.org)
        TELEGRAM_WEBHOOK_SECRET: Expected X-Telegram-Bot-Api-Secret-Token header
        TELEGRAM_POLLING_ENABLED: Run the getUpdates loop (development only)
        TELEGRAM_POLL_TIMEOUT_SECONDS: Long-poll timeout passed to getUpdates
        TELEGRAM_POLL_INTERVAL_SECONDS: Pause between polling iterations

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.telegram.is_configured:
            token = settings.telegram.TELEGRAM_BOT_TOKEN
        ```
    """

    TELEGRAM_BOT_TOKEN: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    TELEGRAM_API_URL: str = Field(
        default="https://api.telegram.org", alias="TELEGRAM_API_URL"
    )
    TELEGRAM_WEBHOOK_SECRET: str | None = Field(
        default=None, alias="TELEGRAM_WEBHOOK_SECRET"
    )
    TELEGRAM_POLLING_ENABLED: bool = Field(
        default=False, alias="TELEGRAM_POLLING_ENABLED"
    )
    TELEGRAM_POLL_TIMEOUT_SECONDS: int = Field(
        default=30, alias="TELEGRAM_POLL_TIMEOUT_SECONDS"
    )
    TELEGRAM_POLL_INTERVAL_SECONDS: float = Field(
        default=2.0, alias="TELEGRAM_POLL_INTERVAL_SECONDS"
    )

    @property
    def is_configured(self) -> bool:
        """True when a bot token is available."""
        return bool(self.TELEGRAM_BOT_TOKEN)
