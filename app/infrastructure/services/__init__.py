"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    BotCommandHandlerDep,
    NotificationStoreDep,
    RuleServiceDep,
    SchedulerServiceDep,
    SettingsDep,
)
from infrastructure.services.providers import (
    get_bot_command_handler,
    get_catalog,
    get_chat_binding_store,
    get_daily_report_aggregator,
    get_delivery_worker,
    get_notification_store,
    get_rule_evaluator,
    get_rule_service,
    get_scheduler_service,
    get_settings,
    get_telegram_client,
    get_telegram_poller,
)

__all__ = [
    "BotCommandHandlerDep",
    "NotificationStoreDep",
    "RuleServiceDep",
    "SchedulerServiceDep",
    "SettingsDep",
    "get_bot_command_handler",
    "get_catalog",
    "get_chat_binding_store",
    "get_daily_report_aggregator",
    "get_delivery_worker",
    "get_notification_store",
    "get_rule_evaluator",
    "get_rule_service",
    "get_scheduler_service",
    "get_settings",
    "get_telegram_client",
    "get_telegram_poller",
]
