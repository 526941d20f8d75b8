"""Startup and shutdown of the background pieces: scheduler and poller.

Neither starts under pytest; API tests drive the routes with overridden
dependencies instead.
"""

import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import (
    get_scheduler_service,
    get_settings,
    get_telegram_poller,
)
from jobs.scheduler import SchedulerService
from modules.telegram import TelegramPoller

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _under_pytest() -> bool:
    return "pytest" in sys.modules


def _log_startup_summary(settings: "Settings", logger: BoundLogger) -> None:
    """One line that says which channels and stores this process will use."""
    logger.info(
        "engine_configuration",
        production=settings.is_production,
        notification_store=settings.notifications.backend,
        chat_binding_store=settings.notifications.chat_bindings_backend,
        telegram_configured=settings.telegram.is_configured,
        email_configured=settings.email.is_configured,
        scheduler_enabled=settings.scheduler.enabled,
        default_send_time=settings.scheduler.default_send_time,
    )
    if not settings.telegram.is_configured:
        logger.warning("telegram_not_configured", effect="chat deliveries will fail")
    if not settings.email.is_configured:
        logger.warning("email_not_configured", effect="email deliveries will fail")


def _start_scheduler(
    settings: "Settings", logger: BoundLogger
) -> Optional[SchedulerService]:
    if _under_pytest() or not settings.scheduler.enabled:
        logger.info("scheduler_not_started", enabled=settings.scheduler.enabled)
        return None

    scheduler = get_scheduler_service()
    try:
        scheduler.start()
    except Exception as exc:
        logger.error("scheduler_start_failed", error=str(exc))
        raise
    return scheduler


def _start_polling(
    settings: "Settings", logger: BoundLogger
) -> Optional[TelegramPoller]:
    if _under_pytest():
        return None

    poller = get_telegram_poller()
    if poller is None:
        logger.info(
            "telegram_polling_not_started",
            polling_enabled=settings.telegram.TELEGRAM_POLLING_ENABLED,
            configured=settings.telegram.is_configured,
        )
        return None

    if settings.is_production:
        # getUpdates conflicts with a registered webhook and with a second poller
        logger.warning("telegram_polling_in_production")
    poller.start()
    return poller


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = configure_logging(settings=settings)
    logger.info("application_startup", version=settings.GIT_SHA)
    _log_startup_summary(settings, logger)

    app.state.scheduler = _start_scheduler(settings, logger)
    app.state.telegram_poller = _start_polling(settings, logger)
    try:
        yield
    finally:
        logger.info("application_shutdown")
        if app.state.telegram_poller is not None:
            app.state.telegram_poller.stop()
        if app.state.scheduler is not None:
            app.state.scheduler.stop()
