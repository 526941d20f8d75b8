"""Infrastructure configuration module - public API.

Centralized configuration for the notification engine using Pydantic
BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    NotificationSettings: Engine storage/retry settings class
    SchedulerSettings: Scheduler settings class

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    token = settings.telegram.TELEGRAM_BOT_TOKEN
    batch_size = settings.notifications.batch_size

    if settings.is_production:
        ...
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.infrastructure.notifications import (
    NotificationSettings,
)
from infrastructure.configuration.infrastructure.scheduler import SchedulerSettings

__all__ = ["Settings", "NotificationSettings", "SchedulerSettings"]
