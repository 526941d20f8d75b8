"""Notification engine infrastructure settings."""

from typing import List

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class NotificationSettings(InfrastructureSettings):
    """Storage, retry and delivery configuration for the notification engine.

    Environment Variables:
        NOTIFICATIONS_BACKEND: Notification store backend - 'memory' or 'dynamodb'
        NOTIFICATIONS_DYNAMODB_TABLE_NAME: DynamoDB table for notification records
        CHAT_BINDINGS_BACKEND: Chat binding store backend - 'memory' or 'dynamodb'
        CHAT_BINDINGS_DYNAMODB_TABLE_NAME: DynamoDB table for chat bindings
        NOTIFICATIONS_MAX_RETRIES: Retries before a record fails (default: 3)
        NOTIFICATIONS_RETRY_DELAYS_HOURS: JSON list of delays (default: [2, 4, 8])
        NOTIFICATIONS_BATCH_SIZE: Records drained per sweep (default: 100)
        NOTIFICATIONS_DEDUP_WINDOW_HOURS: Rolling dedup window (default: 24)
        HTTP_TIMEOUT_SECONDS: Timeout for every gateway call (default: 15)
        CATALOG_SEED_FILE: Optional JSON file seeding the in-memory catalog

    Retry Schedule:
        Delays are a fixed sequence, not exponential multiplication:

            Failure 1: retry in 2h
            Failure 2: retry in 4h
            Failure 3: retry in 8h
            Failure 4: FAILED ("max retries exceeded: <cause>")
    """

    backend: str = Field(
        default="memory",
        alias="NOTIFICATIONS_BACKEND",
        description="Notification store backend: 'memory' or 'dynamodb'",
    )
    dynamodb_table_name: str = Field(
        default="freshtrack-notifications",
        alias="NOTIFICATIONS_DYNAMODB_TABLE_NAME",
    )
    chat_bindings_backend: str = Field(
        default="memory",
        alias="CHAT_BINDINGS_BACKEND",
        description="Chat binding store backend: 'memory' or 'dynamodb'",
    )
    chat_bindings_table_name: str = Field(
        default="freshtrack-telegram-chats",
        alias="CHAT_BINDINGS_DYNAMODB_TABLE_NAME",
    )
    max_retries: int = Field(default=3, alias="NOTIFICATIONS_MAX_RETRIES")
    retry_delays_hours: List[int] = Field(
        default_factory=lambda: [2, 4, 8],
        alias="NOTIFICATIONS_RETRY_DELAYS_HOURS",
    )
    batch_size: int = Field(default=100, alias="NOTIFICATIONS_BATCH_SIZE")
    dedup_window_hours: int = Field(
        default=24, alias="NOTIFICATIONS_DEDUP_WINDOW_HOURS"
    )
    http_timeout_seconds: float = Field(default=15.0, alias="HTTP_TIMEOUT_SECONDS")
    catalog_seed_file: str | None = Field(default=None, alias="CATALOG_SEED_FILE")

