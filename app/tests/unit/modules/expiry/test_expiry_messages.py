import pytest

from infrastructure.notifications.models import NotificationType
from modules.expiry.messages import (
    days_text,
    format_batch_push,
    format_quantity,
    notification_message,
    notification_title,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "days_left, expected",
    [(0, "сегодня"), (1, "завтра"), (4, "через 4 дн."), (-2, "2 дн. назад")],
)
def test_days_text(days_left, expected):
    assert days_text(days_left) == expected


@pytest.mark.unit
def test_format_quantity():
    assert format_quantity(12.0) == "12"
    assert format_quantity(1.5) == "1.5"


@pytest.mark.unit
def test_titles(batch_factory):
    batch = batch_factory()

    assert notification_title(NotificationType.EXPIRED, batch) == "Продукт просрочен: Молоко"
    assert notification_title(NotificationType.EXPIRY_CRITICAL, batch) == "Критический срок: Молоко"


@pytest.mark.unit
def test_messages(batch_factory):
    batch = batch_factory(unit=None, quantity=3)

    assert (
        notification_message(NotificationType.EXPIRED, batch, 0)
        == 'Партия "Молоко" (3 шт) просрочена. Требуется списание.'
    )
    assert notification_message(NotificationType.EXPIRY_CRITICAL, batch, 1).endswith(
        "истекает завтра. Срочно требуется внимание!"
    )


@pytest.mark.unit
def test_batch_push(batch_factory):
    text = format_batch_push(batch_factory(expires_in=5), NotificationType.EXPIRY_WARNING, 5)

    assert text.startswith("⚠️ *ВНИМАНИЕ*")
    assert "📅 Срок: 23.10.2026" in text
    assert "⏰ Истекает: через 5 дн." in text
    assert text.endswith("🏢 Кухня")


@pytest.mark.unit
def test_batch_push_without_department(batch_factory):
    text = format_batch_push(
        batch_factory(department_name=None), NotificationType.EXPIRED, -1
    )

    assert text.endswith("🏢 Отдел не указан")
