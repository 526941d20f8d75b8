"""Base classes for settings sections.

Every section reads the process environment and ``.env`` with exact-case
variable names and ignores variables it does not declare, so the sections
can share one ``.env`` file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    case_sensitive=True,
    extra="ignore",
    populate_by_name=True,
)


class IntegrationSettings(BaseSettings):
    """Gateway sections: Telegram, Resend email and AWS."""

    model_config = ENV_CONFIG


class FeatureSettings(BaseSettings):
    """Feature sections, currently daily reports and expiry warnings."""

    model_config = ENV_CONFIG


class InfrastructureSettings(BaseSettings):
    """Engine sections: storage backends, retry policy, scheduler, server."""

    model_config = ENV_CONFIG
