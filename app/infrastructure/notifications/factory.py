"""Factory for creating notification stores based on configuration."""

from datetime import datetime
from typing import Callable

from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.dynamodb_store import DynamoDBNotificationStore
from infrastructure.notifications.models import utcnow
from infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)
from integrations.aws.dynamodb import DynamoDBClient

logger = get_module_logger()


def create_notification_store(
    settings: Settings,
    backend: str | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> NotificationStore:
    """Factory to create the appropriate notification store.

    Args:
        settings: Application settings
        backend: Optional backend override (memory, dynamodb).
                If None, uses settings.notifications.backend
        clock: Time source, injectable for tests

    Returns:
        Appropriate NotificationStore implementation

    Raises:
        ValueError: If unknown backend specified

    Examples:
        >>> store = create_notification_store(settings)  # Uses configured backend
        >>> store = create_notification_store(settings, backend="memory")
    """
    backend = backend or settings.notifications.backend
    window = settings.notifications.dedup_window_hours

    if backend == "memory":
        logger.info("creating_in_memory_notification_store")
        return InMemoryNotificationStore(dedup_window_hours=window, clock=clock)

    elif backend == "dynamodb":
        logger.info(
            "creating_dynamodb_notification_store",
            table_name=settings.notifications.dynamodb_table_name,
        )
        return DynamoDBNotificationStore(
            client=DynamoDBClient.from_settings(settings.aws),
            table_name=settings.notifications.dynamodb_table_name,
            dedup_window_hours=window,
            clock=clock,
        )

    else:
        raise ValueError(
            f"Unknown notification backend: {backend}. Supported: memory, dynamodb"
        )
