"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated, Optional

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.notifications import NotificationStore
from infrastructure.services.providers import (
    get_bot_command_handler,
    get_notification_store,
    get_rule_service,
    get_scheduler_service,
    get_settings,
)
from jobs.scheduler import SchedulerService
from modules.expiry import RuleService
from modules.telegram import BotCommandHandler

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Notification engine dependencies
NotificationStoreDep = Annotated[NotificationStore, Depends(get_notification_store)]
RuleServiceDep = Annotated[RuleService, Depends(get_rule_service)]
SchedulerServiceDep = Annotated[SchedulerService, Depends(get_scheduler_service)]

# None when no bot token is configured
BotCommandHandlerDep = Annotated[
    Optional[BotCommandHandler], Depends(get_bot_command_handler)
]

__all__ = [
    "SettingsDep",
    "NotificationStoreDep",
    "RuleServiceDep",
    "SchedulerServiceDep",
    "BotCommandHandlerDep",
]
