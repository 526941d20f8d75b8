"""Russian notification texts for expiry alerts."""

from infrastructure.notifications.models import NotificationType
from infrastructure.persistence.models import Batch

DEFAULT_UNIT = "шт"


def format_quantity(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}"


def days_text(days_left: int) -> str:
    if days_left == 0:
        return "сегодня"
    if days_left == 1:
        return "завтра"
    if days_left < 0:
        return f"{abs(days_left)} дн. назад"
    return f"через {days_left} дн."


def notification_title(type_: NotificationType, batch: Batch) -> str:
    if type_ == NotificationType.EXPIRED:
        return f"Продукт просрочен: {batch.product_name}"
    if type_ == NotificationType.EXPIRY_CRITICAL:
        return f"Критический срок: {batch.product_name}"
    if type_ == NotificationType.EXPIRY_WARNING:
        return f"Скоро истекает: {batch.product_name}"
    return batch.product_name


def notification_message(type_: NotificationType, batch: Batch, days_left: int) -> str:
    amount = f"{format_quantity(batch.quantity)} {batch.unit or DEFAULT_UNIT}"
    subject = f'Партия "{batch.product_name}" ({amount})'

    if type_ == NotificationType.EXPIRED:
        return f"{subject} просрочена. Требуется списание."
    if type_ == NotificationType.EXPIRY_CRITICAL:
        return f"{subject} истекает {days_text(days_left)}. Срочно требуется внимание!"
    if type_ == NotificationType.EXPIRY_WARNING:
        return f"{subject} истекает {days_text(days_left)}."
    return f"{batch.product_name}: {amount}"


BATCH_LABELS = {
    NotificationType.EXPIRED: ("❌", "ПРОСРОЧЕНО"),
    NotificationType.EXPIRY_CRITICAL: ("🚨", "КРИТИЧНО"),
    NotificationType.EXPIRY_WARNING: ("⚠️", "ВНИМАНИЕ"),
}


def format_date(value) -> str:
    return value.strftime("%d.%m.%Y") if value else "—"


def format_batch_push(batch: Batch, type_: NotificationType, days_left: int) -> str:
    """Aggregated batch message pushed to linked group chats."""
    icon, label = BATCH_LABELS.get(type_, ("ℹ️", "Информация"))

    return (
        f"{icon} *{label}*\n\n"
        f"📦 *{batch.product_name}*\n"
        f"📊 Количество: {format_quantity(batch.quantity)} {batch.unit or DEFAULT_UNIT}\n"
        f"📅 Срок: {format_date(batch.expiry_date)}\n"
        f"⏰ Истекает: {days_text(days_left)}\n\n"
        f"🏢 {batch.department_name or 'Отдел не указан'}"
    )
