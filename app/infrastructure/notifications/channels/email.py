"""Email channel implementation using the Resend API."""

import html
from datetime import datetime
from typing import Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import (
    NotificationChannel,
    raise_for_result,
)
from infrastructure.notifications.errors import ConfigurationError, NoChannelAddress
from infrastructure.notifications.models import Channel, Notification
from infrastructure.operations import OperationResult
from infrastructure.persistence.models import Recipient
from integrations.resend import ResendClient

logger = get_module_logger()


def email_layout(content: str, title: str = "FreshTrack") -> str:
    """Wrap content in the system email layout."""
    year = datetime.now().year
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{html.escape(title)}</title>
</head>
<body style="font-family: Arial, sans-serif; background: #f5f5f5; padding: 24px;">
  <div style="max-width: 600px; margin: 0 auto; background: #fff; border-radius: 8px; padding: 24px;">
    <h1 style="color: #f97316; margin-top: 0;">🍊 FreshTrack</h1>
    {content}
    <div style="color: #888; font-size: 12px; margin-top: 24px; border-top: 1px solid #eee; padding-top: 24px;">
      <p>© {year} FreshTrack. Все права защищены.</p>
      <p>Это автоматическое системное письмо, не отвечайте на него.</p>
    </div>
  </div>
</body>
</html>"""


def render_notification_email(notification: Notification, app_url: str) -> tuple[str, str]:
    """Render (html, text) bodies for a notification record."""
    data = notification.data or {}
    lines = [notification.message]
    if data.get("productName"):
        lines.append(f"Продукт: {data['productName']}")
    if data.get("quantity"):
        lines.append(f"Количество: {data['quantity']} {data.get('unit') or 'шт'}")
    if data.get("departmentName"):
        lines.append(f"Отдел: {data['departmentName']}")
    if data.get("expiryDate"):
        lines.append(f"Срок: {data['expiryDate']}")

    text = "\n".join([notification.title, ""] + lines)
    body = "".join(f"<p>{html.escape(line)}</p>" for line in lines)
    content = (
        f"<h2>{html.escape(notification.title)}</h2>{body}"
        f'<p><a href="{app_url}/inventory">Открыть инвентарь</a></p>'
    )
    return email_layout(content, title=notification.title), text


class EmailChannel(NotificationChannel):
    """Email notification channel using Resend."""

    def __init__(self, client: Optional[ResendClient], sender: str, app_url: str):
        self._client = client
        self._sender = sender
        self._app_url = app_url.rstrip("/")

    @property
    def channel(self) -> Channel:
        return Channel.EMAIL

    def send(
        self, notification: Notification, recipient: Optional[Recipient]
    ) -> OperationResult:
        if self._client is None:
            raise ConfigurationError("email gateway is not configured")

        if recipient is None or not recipient.email:
            raise NoChannelAddress(self.channel.value, "Recipient has no email address")
        if not recipient.has_deliverable_email:
            raise NoChannelAddress(
                self.channel.value, "Recipient email is invalid or blocked"
            )

        html_body, text_body = render_notification_email(notification, self._app_url)
        result = self._client.send_email(
            to=recipient.email,
            subject=f"FreshTrack: {notification.title}",
            html=html_body,
            text=text_body,
            sender=self._sender,
        )
        raise_for_result(result, self.channel)

        logger.info(
            "email_notification_sent",
            notification_id=notification.id,
            user_id=recipient.id,
        )
        return OperationResult.success(
            data={"provider_message_id": result.get("id")},
            message=f"sent email to user {recipient.id}",
        )
