"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.notifications import (
    NotificationSettings,
)
from infrastructure.configuration.infrastructure.scheduler import SchedulerSettings
from infrastructure.configuration.infrastructure.server import ServerSettings

__all__ = [
    "NotificationSettings",
    "SchedulerSettings",
    "ServerSettings",
]
