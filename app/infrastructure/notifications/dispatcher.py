"""Channel dispatcher.

Routes one delivery attempt of one notification record to the channel
implementation for that channel.

Usage Example:
    dispatcher = ChannelDispatcher(
        channels=[AppChannel(), ChatChannel(telegram), EmailChannel(resend, ...)],
        users=catalog,
    )

    result = dispatcher.dispatch(notification, Channel.CHAT)
    provider_message_id = result.get("provider_message_id")
"""

from typing import Dict, Iterable

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.errors import ConfigurationError
from infrastructure.notifications.models import Channel, Notification
from infrastructure.operations import OperationResult
from infrastructure.persistence.repositories import UserRepository

logger = get_module_logger()


class ChannelDispatcher:
    """Closed set of channels keyed by Channel.

    Attributes:
        channels: Dict mapping Channel to its NotificationChannel
        users: Lookup for the record's recipient
    """

    def __init__(
        self,
        channels: Iterable[NotificationChannel],
        users: UserRepository,
    ):
        self.channels: Dict[Channel, NotificationChannel] = {
            c.channel: c for c in channels
        }
        self.users = users

        logger.info(
            "initialized_channel_dispatcher",
            channels=[c.value for c in self.channels],
        )

    def dispatch(self, notification: Notification, channel: Channel) -> OperationResult:
        """Run one delivery attempt on one channel.

        Raises:
            ConfigurationError: No implementation registered for the channel
            NoChannelAddress: Recipient lacks an address for the channel
            TransientDeliveryError: Gateway failure
        """
        implementation = self.channels.get(channel)
        if implementation is None:
            raise ConfigurationError(f"no channel registered for {channel.value}")

        recipient = (
            self.users.get_user(notification.user_id) if notification.user_id else None
        )

        logger.debug(
            "dispatching_notification",
            notification_id=notification.id,
            channel=channel.value,
            user_id=notification.user_id,
        )
        return implementation.send(notification, recipient)
