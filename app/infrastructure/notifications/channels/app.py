"""In-app channel."""

from typing import Optional

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import Channel, Notification
from infrastructure.operations import OperationResult
from infrastructure.persistence.models import Recipient


class AppChannel(NotificationChannel):
    """The stored record is the in-app notification; nothing is sent."""

    @property
    def channel(self) -> Channel:
        return Channel.APP

    def send(
        self, notification: Notification, recipient: Optional[Recipient]
    ) -> OperationResult:
        return OperationResult.success(message="stored in app feed")
