"""Chat channel implementation using the Telegram Bot API."""

from typing import Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import (
    NotificationChannel,
    raise_for_result,
)
from infrastructure.notifications.errors import ConfigurationError, NoChannelAddress
from infrastructure.notifications.models import Channel, Notification, NotificationType
from infrastructure.operations import OperationResult
from infrastructure.persistence.models import Recipient
from integrations.telegram import TelegramClient

logger = get_module_logger()

TYPE_ICONS = {
    NotificationType.EXPIRED: "❌",
    NotificationType.EXPIRY_CRITICAL: "🚨",
    NotificationType.EXPIRY_WARNING: "⚠️",
}


def format_chat_message(notification: Notification) -> str:
    """Render a record as Telegram Markdown."""
    icon = TYPE_ICONS.get(notification.type, "ℹ️")
    text = f"{icon} *{notification.title}*\n\n{notification.message}"

    data = notification.data or {}
    if data.get("productName"):
        text += f"\n\n📦 *Продукт:* {data['productName']}"
    if data.get("quantity"):
        text += f"\n📊 *Количество:* {data['quantity']} {data.get('unit') or 'шт'}"
    if data.get("departmentName"):
        text += f"\n🏢 *Отдел:* {data['departmentName']}"
    if data.get("expiryDate"):
        text += f"\n📅 *Срок:* {data['expiryDate']}"
    return text


class ChatChannel(NotificationChannel):
    """Telegram chat notification channel.

    Sends to the chat stored on the record, falling back to the user's
    linked private chat.
    """

    def __init__(self, client: Optional[TelegramClient]):
        self._client = client

    @property
    def channel(self) -> Channel:
        return Channel.CHAT

    def send(
        self, notification: Notification, recipient: Optional[Recipient]
    ) -> OperationResult:
        if self._client is None:
            raise ConfigurationError("telegram gateway is not configured")

        chat_id = notification.chat_id or (
            recipient.telegram_chat_id if recipient else None
        )
        if not chat_id:
            raise NoChannelAddress(self.channel.value, "User has no Telegram chat ID")

        result = self._client.send_message(chat_id, format_chat_message(notification))
        raise_for_result(result, self.channel)

        message_id = TelegramClient.message_id(result)
        logger.info(
            "telegram_notification_sent",
            notification_id=notification.id,
            chat_id=chat_id,
            message_id=message_id,
        )
        return OperationResult.success(
            data={"provider_message_id": message_id, "chat_id": str(chat_id)},
            message=f"sent to chat {chat_id}",
        )
