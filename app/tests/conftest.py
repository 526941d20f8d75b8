"""Shared fixtures for notification engine tests.

Time is frozen at 2026-10-18 06:00 UTC through the ``clock`` fixture; every
component under test takes it as its time source.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.models import (
    Channel,
    ChatBinding,
    Notification,
    NotificationRule,
    NotificationType,
    Priority,
    Role,
)
from infrastructure.notifications.store import InMemoryNotificationStore
from infrastructure.operations import OperationResult
from infrastructure.persistence.chat_bindings import InMemoryChatBindingStore
from infrastructure.persistence.memory import InMemoryCatalog
from infrastructure.persistence.models import Batch, Department, Hotel, Recipient
from infrastructure.persistence.rules import InMemoryRuleStore
from integrations.resend import ResendClient
from integrations.telegram import TelegramClient

NOW = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)
TODAY = NOW.date()
BOT_USER_ID = 999


class FakeClock:
    """Callable time source that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def today():
    return TODAY


# Collaborator factories


@pytest.fixture
def hotel_factory():
    def _factory(**kwargs) -> Hotel:
        defaults = {"id": "hotel-1", "code": "GRAND", "name": "Grand Hotel"}
        defaults.update(kwargs)
        return Hotel(**defaults)

    return _factory


@pytest.fixture
def department_factory():
    def _factory(**kwargs) -> Department:
        defaults = {
            "id": "dept-1",
            "hotel_id": "hotel-1",
            "code": "KITCHEN",
            "name": "Кухня",
            "email": "kitchen@example.com",
        }
        defaults.update(kwargs)
        return Department(**defaults)

    return _factory


@pytest.fixture
def user_factory():
    def _factory(**kwargs) -> Recipient:
        defaults = {
            "id": "user-1",
            "name": "Айгерим",
            "email": "admin@example.com",
            "role": Role.HOTEL_ADMIN,
            "hotel_id": "hotel-1",
            "telegram_chat_id": "1001",
        }
        defaults.update(kwargs)
        return Recipient(**defaults)

    return _factory


@pytest.fixture
def batch_factory():
    def _factory(expires_in: Optional[int] = 5, **kwargs) -> Batch:
        defaults = {
            "id": "batch-1",
            "hotel_id": "hotel-1",
            "department_id": "dept-1",
            "department_name": "Кухня",
            "product_name": "Молоко",
            "unit": "л",
            "quantity": 12,
            "expiry_date": TODAY + timedelta(days=expires_in)
            if expires_in is not None
            else None,
        }
        defaults.update(kwargs)
        return Batch(**defaults)

    return _factory


# Engine factories


@pytest.fixture
def rule_factory():
    def _factory(**kwargs) -> NotificationRule:
        defaults = {
            "id": "rule-system",
            "warning_days": 7,
            "critical_days": 3,
            "channels": [Channel.APP],
            "recipient_roles": [Role.HOTEL_ADMIN, Role.DEPARTMENT_MANAGER],
        }
        defaults.update(kwargs)
        return NotificationRule(**defaults)

    return _factory


@pytest.fixture
def notification_factory():
    def _factory(**kwargs) -> Notification:
        defaults = {
            "hotel_id": "hotel-1",
            "user_id": "user-1",
            "batch_id": "batch-1",
            "rule_id": "rule-system",
            "type": NotificationType.EXPIRY_WARNING,
            "title": "Скоро истекает: Молоко",
            "message": 'Партия "Молоко" (12 л) истекает через 5 дн.',
            "channels": [Channel.APP],
            "priority": Priority.NORMAL,
            "created_at": NOW,
        }
        defaults.update(kwargs)
        return Notification(**defaults)

    return _factory


@pytest.fixture
def chat_binding_factory():
    def _factory(**kwargs) -> ChatBinding:
        defaults = {
            "chat_id": -100500,
            "chat_type": "group",
            "chat_title": "Kitchen team",
            "hotel_id": "hotel-1",
            "added_at": NOW,
        }
        defaults.update(kwargs)
        return ChatBinding(**defaults)

    return _factory


# Stores


@pytest.fixture
def catalog(hotel_factory, department_factory, user_factory):
    """Catalog with one hotel, one department and three users."""
    catalog = InMemoryCatalog()
    catalog.add_hotel(hotel_factory())
    catalog.add_department(department_factory())
    catalog.add_user(user_factory())
    catalog.add_user(
        user_factory(
            id="user-2",
            name="Марат",
            email="manager@example.com",
            role=Role.DEPARTMENT_MANAGER,
            department_id="dept-1",
            telegram_chat_id=None,
        )
    )
    catalog.add_user(
        user_factory(
            id="user-3",
            name="Дана",
            email="staff@example.com",
            role=Role.STAFF,
            department_id="dept-1",
            telegram_chat_id=None,
        )
    )
    return catalog


@pytest.fixture
def notification_store(clock):
    return InMemoryNotificationStore(dedup_window_hours=24, clock=clock)


@pytest.fixture
def rule_store():
    return InMemoryRuleStore()


@pytest.fixture
def chat_binding_store():
    return InMemoryChatBindingStore()


# Gateways


@pytest.fixture
def mock_telegram():
    client = MagicMock(spec=TelegramClient)
    client.send_message.return_value = OperationResult.success(
        data={"message_id": 42}
    )
    client.get_me.return_value = OperationResult.success(
        data={"id": BOT_USER_ID, "is_bot": True, "username": "freshtrack_bot"}
    )
    client.get_updates.return_value = OperationResult.success(data=[])
    return client


@pytest.fixture
def mock_resend():
    client = MagicMock(spec=ResendClient)
    client.send_email.return_value = OperationResult.success(data={"id": "email-1"})
    return client

