"""Chat-bot reply texts (Telegram Markdown)."""

from typing import List, Optional

LINK_FORMAT_ERROR = (
    "❌ *Ошибка формата*\n\nИспользуйте: `/link hotel:КОД_ОТЕЛЯ`\n"
    "Или: `/link hotel:КОД_ОТЕЛЯ department:КОД_ОТДЕЛА`"
)

UNLINKED = (
    "✅ *Чат отвязан*\n\nУведомления больше не будут приходить в этот чат.\n"
    "Используйте `/link hotel:КОД` чтобы привязать снова."
)

STATUS_NOT_REGISTERED = (
    "ℹ️ *Статус чата*\n\n❌ Чат не зарегистрирован в системе.\n"
    "Добавьте бота заново или используйте `/link`"
)

HELP = """📚 *FreshTrack Bot - Справка*

*Основные команды:*
/link hotel:КОД - привязать к отелю
/link hotel:КОД department:КОД - привязать к отделу
/unlink - отвязать чат
/status - статус привязки

*Типы уведомлений:*
🚨 Критические (≤3 дня)
⚠️ Предупреждения (≤7 дней)
❌ Просроченные

*Настройка:*
Добавьте бота в групповой чат и используйте `/link` для привязки к отелю или отделу.

💡 _Бот автоматически отправляет уведомления согласно настроенным правилам._"""

WELCOME_SETUP = """
📌 *Для настройки уведомлений:*
`/link hotel:КОД_ОТЕЛЯ` - привязать к отелю
`/link hotel:КОД department:КОД` - привязать к отделу
"""


def welcome(chat_type: str) -> str:
    setup = WELCOME_SETUP if chat_type != "private" else ""
    return (
        "👋 *Добро пожаловать в FreshTrack Bot!*\n\n"
        "Я помогу отслеживать сроки годности продуктов.\n\n"
        f"{setup}"
        "📋 *Команды:*\n"
        "/status - статус привязки чата\n"
        "/help - справка по командам\n"
        "/unlink - отвязать чат\n\n"
        "После привязки сюда будут приходить уведомления о товарах с истекающим сроком."
    )


def hotel_not_found(code: str) -> str:
    return f'❌ Отель "{code}" не найден'


def department_not_found(code: str, hotel_name: str) -> str:
    return f'❌ Отдел "{code}" не найден в отеле "{hotel_name}"'


def linked(hotel_name: str, department_name: Optional[str] = None) -> str:
    if department_name:
        link_info = f"🏨 {hotel_name} → 🏢 {department_name}"
    else:
        link_info = f"🏨 {hotel_name} (все отделы)"
    return (
        f"✅ *Чат успешно привязан!*\n\n{link_info}\n\n"
        "Теперь сюда будут приходить уведомления о сроках годности."
    )


def status(
    chat_id: int,
    is_active: bool,
    hotel_name: Optional[str],
    department_name: Optional[str],
    notification_types: List[str],
) -> str:
    text = "ℹ️ *Статус чата*\n\n"
    text += f"📍 ID: `{chat_id}`\n"
    text += f"📊 Статус: {'🟢 Активен' if is_active else '🔴 Неактивен'}\n"

    if hotel_name:
        text += f"\n🏨 *Отель:* {hotel_name}"
        text += f"\n🏢 *Отдел:* {department_name or 'Все отделы'}"
    else:
        text += "\n⚠️ *Не привязан* - используйте `/link hotel:КОД`"

    if notification_types:
        types = "\n".join(f"• {t}" for t in notification_types)
        text += f"\n\n📬 *Типы уведомлений:*\n{types}"
    return text


def error(message: str) -> str:
    return f"❌ Ошибка: {message}"
