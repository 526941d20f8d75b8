"""Email gateway (Resend) integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class EmailSettings(IntegrationSettings):
    """Resend email API configuration.

    Environment Variables:
        EMAIL_ENABLED: Global switch for the email channel (default: True)
        RESEND_API_KEY: Resend API key
        RESEND_API_URL: Resend API base URL (default: https://api.resend.com)
        EMAIL_FROM_SYSTEM: Sender used for expiry warnings
        EMAIL_FROM_NOREPLY: Sender used for daily reports
        APP_URL: Public URL of the web application, used in email links
    """

    EMAIL_ENABLED: bool = Field(default=True, alias="EMAIL_ENABLED")
    RESEND_API_KEY: str | None = Field(default=None, alias="RESEND_API_KEY")
    RESEND_API_URL: str = Field(
        default="https://api.resend.com", alias="RESEND_API_URL"
    )
    EMAIL_FROM_SYSTEM: str = Field(
        default="FreshTrack System <system@freshtrack.systems>",
        alias="EMAIL_FROM_SYSTEM",
    )
    EMAIL_FROM_NOREPLY: str = Field(
        default="FreshTrack <no-reply@freshtrack.systems>",
        alias="EMAIL_FROM_NOREPLY",
    )
    APP_URL: str = Field(default="http://localhost:5173", alias="APP_URL")

    @property
    def is_configured(self) -> bool:
        """True when the email channel is enabled and an API key is set."""
        return self.EMAIL_ENABLED and bool(self.RESEND_API_KEY)
