"""Notification channel abstract base class.

All channel implementations (app, chat, email) implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from infrastructure.notifications.errors import TransientDeliveryError
from infrastructure.notifications.models import Channel, Notification
from infrastructure.operations import OperationResult
from infrastructure.persistence.models import Recipient


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    Each channel handles delivery through a specific gateway:
    - AppChannel: in-app feed, the stored record is the delivery
    - ChatChannel: Telegram Bot API
    - EmailChannel: Resend email API

    Failures are raised, not returned, so the delivery worker can apply the
    retry policy in one place.

    Example Implementation:
        class ChatChannel(NotificationChannel):

            @property
            def channel(self) -> Channel:
                return Channel.CHAT

            def send(self, notification, recipient):
                chat_id = self._resolve_chat_id(notification, recipient)
                result = self._client.send_message(chat_id, text)
                raise_for_result(result, self.channel)
                return result
    """

    @property
    @abstractmethod
    def channel(self) -> Channel:
        """Channel identifier used for routing and logging."""

    @abstractmethod
    def send(
        self, notification: Notification, recipient: Optional[Recipient]
    ) -> OperationResult:
        """Deliver one notification to one recipient.

        Args:
            notification: Record to deliver
            recipient: User the record is addressed to, if any

        Returns:
            Successful OperationResult; ``data`` may carry
            ``provider_message_id`` and ``chat_id``

        Raises:
            NoChannelAddress: Recipient has no usable address
            TransientDeliveryError: Gateway call failed
            ConfigurationError: Gateway not configured
        """


def raise_for_result(result: OperationResult, channel: Channel) -> None:
    """Turn a failed gateway result into TransientDeliveryError."""
    if result.is_success:
        return
    raise TransientDeliveryError(
        f"{channel.value} gateway error: {result.describe()}",
        error_code=result.error_code,
        retry_after=result.retry_after,
    )
