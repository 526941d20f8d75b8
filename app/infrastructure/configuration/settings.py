"""Top-level settings object handed out by get_settings()."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from infrastructure.configuration.base import ENV_CONFIG
from infrastructure.configuration.features import ReportSettings
from infrastructure.configuration.infrastructure import (
    NotificationSettings,
    SchedulerSettings,
    ServerSettings,
)
from infrastructure.configuration.integrations import (
    AwsSettings,
    EmailSettings,
    TelegramSettings,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Process-wide configuration.

    Each section reads its own variables (see the section classes); a
    section passed explicitly, as tests do, replaces the one read from the
    environment.

    Environment Variables:
        PREFIX: Environment prefix such as ``dev-``; empty in production
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
        GIT_SHA: Deployed commit, reported by /version and in every log line
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    aws: AwsSettings = Field(default_factory=AwsSettings)

    reports: ReportSettings = Field(default_factory=ReportSettings)

    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    model_config = ENV_CONFIG

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def is_production(self) -> bool:
        return not self.PREFIX
