from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter
from infrastructure.configuration import Settings
from infrastructure.configuration.integrations import TelegramSettings
from infrastructure.services import (
    get_bot_command_handler,
    get_rule_service,
    get_scheduler_service,
    get_settings,
)
from jobs.scheduler import SchedulerService
from modules.expiry import RuleService
from modules.telegram import BotCommandHandler
from server.server import handler as app


@pytest.fixture(autouse=True)
def reset_rate_limits():
    get_limiter().reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def scheduler_service():
    return MagicMock(spec=SchedulerService)


@pytest.fixture
def rule_service(rule_store, notification_store):
    return RuleService(rule_store, notification_store)


@pytest.fixture
def bot_handler():
    handler = MagicMock(spec=BotCommandHandler)
    handler.process_update.return_value = "help"
    return handler


@pytest.fixture
def webhook_secret():
    return None


@pytest.fixture
def client(scheduler_service, rule_service, bot_handler, webhook_secret):
    settings = Settings(
        GIT_SHA="abc123",
        telegram=TelegramSettings(TELEGRAM_WEBHOOK_SECRET=webhook_secret),
    )
    app.dependency_overrides[get_scheduler_service] = lambda: scheduler_service
    app.dependency_overrides[get_rule_service] = lambda: rule_service
    app.dependency_overrides[get_bot_command_handler] = lambda: bot_handler
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)
