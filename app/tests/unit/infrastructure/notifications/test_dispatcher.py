"""Unit tests for ChannelDispatcher."""

from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.channels import AppChannel, NotificationChannel
from infrastructure.notifications.dispatcher import ChannelDispatcher
from infrastructure.notifications.errors import ConfigurationError
from infrastructure.notifications.models import Channel
from infrastructure.operations import OperationResult


@pytest.fixture
def email_channel():
    channel = MagicMock(spec=NotificationChannel)
    channel.channel = Channel.EMAIL
    channel.send.return_value = OperationResult.success(
        data={"provider_message_id": "email-1"}
    )
    return channel


@pytest.mark.unit
class TestChannelDispatcher:
    def test_registers_channels_by_identifier(self, catalog, email_channel):
        dispatcher = ChannelDispatcher([AppChannel(), email_channel], users=catalog)

        assert set(dispatcher.channels) == {Channel.APP, Channel.EMAIL}

    def test_dispatch_passes_recipient(
        self, catalog, email_channel, notification_factory
    ):
        dispatcher = ChannelDispatcher([email_channel], users=catalog)
        notification = notification_factory(channels=["email"])

        result = dispatcher.dispatch(notification, Channel.EMAIL)

        assert result.data == {"provider_message_id": "email-1"}
        sent_notification, recipient = email_channel.send.call_args.args
        assert sent_notification is notification
        assert recipient.id == "user-1"

    def test_dispatch_without_user(self, catalog, email_channel, notification_factory):
        dispatcher = ChannelDispatcher([email_channel], users=catalog)

        dispatcher.dispatch(notification_factory(user_id=None), Channel.EMAIL)

        assert email_channel.send.call_args.args[1] is None

    def test_unregistered_channel_raises(self, catalog, notification_factory):
        dispatcher = ChannelDispatcher([AppChannel()], users=catalog)

        with pytest.raises(ConfigurationError):
            dispatcher.dispatch(notification_factory(), Channel.CHAT)
