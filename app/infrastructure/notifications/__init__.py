"""Notification records, channels and delivery.

Usage:
    from infrastructure.notifications import (
        ChannelDispatcher,
        DeliveryWorker,
        create_notification_store,
    )

    store = create_notification_store(settings)
    worker = DeliveryWorker(store, dispatcher, batches=catalog)
    stats = worker.process_queue()
"""

from infrastructure.notifications.models import (
    Channel,
    ChatBinding,
    DeliveryState,
    Notification,
    NotificationRule,
    NotificationType,
    Priority,
    Role,
    RuleType,
)
from infrastructure.notifications.errors import (
    AlreadyResolved,
    ConfigurationError,
    InvalidTransition,
    NoChannelAddress,
    NotificationEngineError,
    TransientDeliveryError,
    ValidationError,
)
from infrastructure.notifications.retry import RetryDecision, RetryPolicy
from infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)
from infrastructure.notifications.dynamodb_store import DynamoDBNotificationStore
from infrastructure.notifications.factory import create_notification_store
from infrastructure.notifications.channels import (
    AppChannel,
    ChatChannel,
    EmailChannel,
    NotificationChannel,
)
from infrastructure.notifications.dispatcher import ChannelDispatcher
from infrastructure.notifications.worker import DeliveryWorker

__all__ = [
    # Models
    "Channel",
    "ChatBinding",
    "DeliveryState",
    "Notification",
    "NotificationRule",
    "NotificationType",
    "Priority",
    "Role",
    "RuleType",
    # Errors
    "AlreadyResolved",
    "ConfigurationError",
    "InvalidTransition",
    "NoChannelAddress",
    "NotificationEngineError",
    "TransientDeliveryError",
    "ValidationError",
    # Retry
    "RetryDecision",
    "RetryPolicy",
    # Storage
    "NotificationStore",
    "InMemoryNotificationStore",
    "DynamoDBNotificationStore",
    "create_notification_store",
    # Channels
    "NotificationChannel",
    "AppChannel",
    "ChatChannel",
    "EmailChannel",
    # Delivery
    "ChannelDispatcher",
    "DeliveryWorker",
]
