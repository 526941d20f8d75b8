"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for the notification engine
and its collaborators.
"""

from functools import lru_cache
from typing import Optional

from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from infrastructure.notifications import (
    AppChannel,
    ChannelDispatcher,
    ChatChannel,
    DeliveryWorker,
    EmailChannel,
    NotificationStore,
    RetryPolicy,
    create_notification_store,
)
from infrastructure.persistence import (
    ChatBindingStore,
    InMemoryCatalog,
    InMemoryRuleStore,
    create_chat_binding_store,
)
from integrations.resend import ResendClient
from integrations.telegram import TelegramClient
from jobs.scheduler import SchedulerService
from modules.expiry import (
    Deduplicator,
    ExpiryWarningMailer,
    RecipientResolver,
    RuleEvaluator,
    RuleService,
)
from modules.reports import DailyReportAggregator
from modules.telegram import BotCommandHandler, TelegramPoller

logger = get_module_logger()


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            return settings.dict()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_catalog() -> InMemoryCatalog:
    """Collaborator data, seeded from CATALOG_SEED_FILE when set."""
    seed_file = get_settings().notifications.catalog_seed_file
    if seed_file:
        return InMemoryCatalog.from_seed_file(seed_file)
    return InMemoryCatalog()


@lru_cache
def get_rule_store() -> InMemoryRuleStore:
    seed_file = get_settings().notifications.catalog_seed_file
    if seed_file:
        return InMemoryRuleStore.from_seed_file(seed_file)
    return InMemoryRuleStore()


@lru_cache
def get_notification_store() -> NotificationStore:
    return create_notification_store(get_settings())


@lru_cache
def get_chat_binding_store() -> ChatBindingStore:
    return create_chat_binding_store(get_settings())


@lru_cache
def get_telegram_client() -> Optional[TelegramClient]:
    """Telegram gateway, or None when no bot token is configured."""
    settings = get_settings()
    if not settings.telegram.is_configured:
        logger.info("telegram_client_disabled", reason="no bot token")
        return None
    return TelegramClient(
        token=settings.telegram.TELEGRAM_BOT_TOKEN,
        api_url=settings.telegram.TELEGRAM_API_URL,
        timeout=settings.notifications.http_timeout_seconds,
    )


@lru_cache
def get_resend_client() -> Optional[ResendClient]:
    """Email gateway, or None when email is disabled or has no API key."""
    settings = get_settings()
    if not settings.email.is_configured:
        logger.info("resend_client_disabled", reason="email not configured")
        return None
    return ResendClient(
        api_key=settings.email.RESEND_API_KEY,
        api_url=settings.email.RESEND_API_URL,
        timeout=settings.notifications.http_timeout_seconds,
    )


@lru_cache
def get_channel_dispatcher() -> ChannelDispatcher:
    settings = get_settings()
    return ChannelDispatcher(
        channels=[
            AppChannel(),
            ChatChannel(get_telegram_client()),
            EmailChannel(
                get_resend_client(),
                sender=settings.email.EMAIL_FROM_SYSTEM,
                app_url=settings.email.APP_URL,
            ),
        ],
        users=get_catalog(),
    )


@lru_cache
def get_delivery_worker() -> DeliveryWorker:
    settings = get_settings()
    return DeliveryWorker(
        store=get_notification_store(),
        dispatcher=get_channel_dispatcher(),
        batches=get_catalog(),
        policy=RetryPolicy(
            delays_hours=tuple(settings.notifications.retry_delays_hours),
            max_retries=settings.notifications.max_retries,
        ),
        batch_size=settings.notifications.batch_size,
    )


@lru_cache
def get_rule_evaluator() -> RuleEvaluator:
    catalog = get_catalog()
    store = get_notification_store()
    return RuleEvaluator(
        rules=get_rule_store(),
        batches=catalog,
        resolver=RecipientResolver(catalog),
        dedup=Deduplicator(store),
        store=store,
        chat_bindings=get_chat_binding_store(),
        telegram=get_telegram_client(),
    )


@lru_cache
def get_expiry_warning_mailer() -> ExpiryWarningMailer:
    settings = get_settings()
    return ExpiryWarningMailer(
        catalog=get_catalog(),
        client=get_resend_client(),
        sender=settings.email.EMAIL_FROM_SYSTEM,
        app_url=settings.email.APP_URL,
        enabled=settings.email.EMAIL_ENABLED,
        soon_days=settings.reports.warning_soon_days,
    )


@lru_cache
def get_daily_report_aggregator() -> DailyReportAggregator:
    settings = get_settings()
    return DailyReportAggregator(
        catalog=get_catalog(),
        chat_bindings=get_chat_binding_store(),
        telegram=get_telegram_client(),
        resend=get_resend_client(),
        default_template=settings.reports.daily_report_template,
        sender=settings.email.EMAIL_FROM_NOREPLY,
        app_url=settings.email.APP_URL,
        email_enabled=settings.email.EMAIL_ENABLED,
        email_warning_days=settings.reports.warning_soon_days,
        list_limit=settings.reports.list_limit,
    )


@lru_cache
def get_rule_service() -> RuleService:
    return RuleService(rules=get_rule_store(), notifications=get_notification_store())


@lru_cache
def get_bot_command_handler() -> Optional[BotCommandHandler]:
    client = get_telegram_client()
    if client is None:
        return None
    catalog = get_catalog()
    return BotCommandHandler(
        client=client,
        bindings=get_chat_binding_store(),
        hotels=catalog,
        departments=catalog,
    )


@lru_cache
def get_telegram_poller() -> Optional[TelegramPoller]:
    settings = get_settings()
    handler = get_bot_command_handler()
    if handler is None or not settings.telegram.TELEGRAM_POLLING_ENABLED:
        return None
    return TelegramPoller(
        client=handler.client,
        handler=handler,
        timeout=settings.telegram.TELEGRAM_POLL_TIMEOUT_SECONDS,
        interval=settings.telegram.TELEGRAM_POLL_INTERVAL_SECONDS,
    )


@lru_cache
def get_scheduler_service() -> SchedulerService:
    settings = get_settings()
    return SchedulerService(
        settings=get_catalog(),
        evaluator=get_rule_evaluator(),
        worker=get_delivery_worker(),
        mailer=get_expiry_warning_mailer(),
        aggregator=get_daily_report_aggregator(),
        hotel_id=settings.scheduler.hotel_id,
        default_send_time=settings.scheduler.default_send_time,
        fallback_timezone=settings.scheduler.fallback_timezone,
        sweep_interval_minutes=settings.scheduler.sweep_interval_minutes,
        run_interval_seconds=settings.scheduler.run_interval_seconds,
        poller=get_telegram_poller(),
    )
