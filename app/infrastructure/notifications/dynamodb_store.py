"""DynamoDB-backed notification store.

Provides a durable store implementation using AWS DynamoDB. Suitable for a
single scheduler instance that must survive restarts; it does not coordinate
several workers.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import InvalidTransition
from infrastructure.notifications.models import (
    Channel,
    DeliveryState,
    Notification,
    utcnow,
)
from infrastructure.notifications.retry import RetryDecision
from infrastructure.notifications.store import due_sort_key
from infrastructure.operations import CONDITION_FAILED
from integrations.aws.dynamodb import DynamoDBClient

logger = get_module_logger()

STATUS_INDEX = "status-next_retry_at-index"


class NotificationStoreError(RuntimeError):
    """Raised when DynamoDB rejects a store operation."""


class DynamoDBNotificationStore:
    """DynamoDB-backed notification store.

    This implementation provides:
    - Atomic dedup using a conditional put on a fingerprint guard item
    - Optimistic status transitions (conditional on the current status)
    - Due-record queries using a GSI on status + next_retry_at

    Table Schema:
        PK: pk (String)
            notification#<id>   the record; full model JSON in ``body``
            fingerprint#<hash>  dedup guard; ``notification_id``, ``expires_at``
        Attributes: entity, status, next_retry_at (epoch seconds, 0 when
                    due immediately), hotel_id, body, ttl (guards only)
        GSI: status-next_retry_at-index (status + next_retry_at)

    Args:
        client: DynamoDBClient
        table_name: DynamoDB table name
        dedup_window_hours: Rolling window for fingerprint uniqueness
    """

    def __init__(
        self,
        client: DynamoDBClient,
        table_name: str,
        dedup_window_hours: int = 24,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.client = client
        self.table_name = table_name
        self.dedup_window = timedelta(hours=dedup_window_hours)
        self._clock = clock

        logger.info(
            "dynamodb_notification_store_initialized",
            table_name=table_name,
            dedup_window_hours=dedup_window_hours,
        )

    @staticmethod
    def _key(notification_id: str) -> Dict[str, Any]:
        return {"pk": {"S": f"notification#{notification_id}"}}

    @staticmethod
    def _to_item(notification: Notification) -> Dict[str, Any]:
        next_retry = (
            int(notification.next_retry_at.timestamp())
            if notification.next_retry_at
            else 0
        )
        item: Dict[str, Any] = {
            "pk": {"S": f"notification#{notification.id}"},
            "entity": {"S": "notification"},
            "status": {"S": notification.status.value},
            "next_retry_at": {"N": str(next_retry)},
            "body": {"S": notification.model_dump_json()},
        }
        if notification.hotel_id:
            item["hotel_id"] = {"S": notification.hotel_id}
        if notification.fingerprint:
            item["fingerprint"] = {"S": notification.fingerprint}
        return item

    @staticmethod
    def _from_item(item: Dict[str, Any]) -> Notification:
        return Notification.model_validate_json(item["body"]["S"])

    def _acquire_fingerprint(self, notification: Notification) -> bool:
        now = self._clock()
        expires_at = int((now + self.dedup_window).timestamp())
        result = self.client.put_item(
            table_name=self.table_name,
            Item={
                "pk": {"S": f"fingerprint#{notification.fingerprint}"},
                "entity": {"S": "fingerprint"},
                "notification_id": {"S": notification.id},
                "expires_at": {"N": str(expires_at)},
                "ttl": {"N": str(expires_at)},
            },
            ConditionExpression="attribute_not_exists(pk) OR expires_at < :now",
            ExpressionAttributeValues={":now": {"N": str(int(now.timestamp()))}},
        )
        if result.is_success:
            return True
        if result.error_code == CONDITION_FAILED:
            return False
        raise NotificationStoreError(f"Failed to write fingerprint: {result.message}")

    def _release_fingerprint(self, notification: Notification) -> None:
        """Drop the guard of a FAILED record so the condition can alert again."""
        if not notification.fingerprint:
            return
        result = self.client.delete_item(
            table_name=self.table_name,
            Key={"pk": {"S": f"fingerprint#{notification.fingerprint}"}},
            ConditionExpression="notification_id = :id",
            ExpressionAttributeValues={":id": {"S": notification.id}},
        )
        if not result.is_success and result.error_code != CONDITION_FAILED:
            logger.warning(
                "fingerprint_release_failed",
                notification_id=notification.id,
                error=result.message,
            )

    def create(self, notification: Notification) -> bool:
        if notification.fingerprint and not self._acquire_fingerprint(notification):
            logger.debug(
                "notification_duplicate_refused",
                fingerprint=notification.fingerprint,
                batch_id=notification.batch_id,
            )
            return False

        result = self.client.put_item(
            table_name=self.table_name,
            Item=self._to_item(notification),
            ConditionExpression="attribute_not_exists(pk)",
        )
        if not result.is_success:
            logger.error(
                "dynamodb_notification_create_failed",
                notification_id=notification.id,
                error=result.message,
                error_code=result.error_code,
            )
            # No record backs the guard, so it must not suppress the next attempt
            self._release_fingerprint(notification)
            raise NotificationStoreError(
                f"Failed to save notification: {result.message}"
            )

        logger.info(
            "notification_created",
            notification_id=notification.id,
            type=notification.type.value,
            channels=[c.value for c in notification.channels],
            priority=int(notification.priority),
        )
        return True

    def has_recent_fingerprint(self, fingerprint: str) -> bool:
        result = self.client.get_item(
            table_name=self.table_name,
            Key={"pk": {"S": f"fingerprint#{fingerprint}"}},
            ConsistentRead=True,
        )
        if not result.is_success:
            raise NotificationStoreError(
                f"Failed to read fingerprint: {result.message}"
            )
        item = (result.data or {}).get("Item")
        if not item:
            return False
        return int(item["expires_at"]["N"]) >= int(self._clock().timestamp())

    def get(self, notification_id: str) -> Optional[Notification]:
        result = self.client.get_item(
            table_name=self.table_name,
            Key=self._key(notification_id),
            ConsistentRead=True,
        )
        if not result.is_success:
            raise NotificationStoreError(
                f"Failed to load notification: {result.message}"
            )
        item = (result.data or {}).get("Item")
        return self._from_item(item) if item else None

    def fetch_due(self, limit: int = 100) -> List[Notification]:
        now = int(self._clock().timestamp())
        due: List[Notification] = []

        for status in (DeliveryState.PENDING, DeliveryState.RETRY):
            result = self.client.query(
                table_name=self.table_name,
                IndexName=STATUS_INDEX,
                KeyConditionExpression="#status = :status AND next_retry_at <= :now",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":status": {"S": status.value},
                    ":now": {"N": str(now)},
                },
            )
            if not result.is_success:
                logger.error(
                    "dynamodb_fetch_due_failed",
                    status=status.value,
                    error=result.message,
                    error_code=result.error_code,
                )
                continue
            due.extend(self._from_item(item) for item in result.data or [])

        due.sort(key=due_sort_key)
        logger.debug("fetched_due_notifications", count=min(len(due), limit))
        return due[:limit]

    def _put_transition(
        self, current: Notification, updated: Notification
    ) -> Notification:
        result = self.client.put_item(
            table_name=self.table_name,
            Item=self._to_item(updated),
            ConditionExpression="#status = :current",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={":current": {"S": current.status.value}},
        )
        if result.is_success:
            return updated
        if result.error_code == CONDITION_FAILED:
            raise InvalidTransition(
                current.id, current.status.value, updated.status.value
            )
        raise NotificationStoreError(
            f"Failed to update notification: {result.message}"
        )

    def _transition(
        self, notification_id: str, target: DeliveryState, **changes
    ) -> Notification:
        current = self.get(notification_id)
        if current is None:
            raise KeyError(f"notification {notification_id} not found")
        if not current.status.can_transition_to(target):
            raise InvalidTransition(notification_id, current.status.value, target.value)

        updated = current.model_copy(update={"status": target, **changes})
        saved = self._put_transition(current, updated)
        if target == DeliveryState.FAILED:
            self._release_fingerprint(saved)
        return saved

    def mark_sending(self, notification_id: str) -> Notification:
        return self._transition(notification_id, DeliveryState.SENDING)

    def mark_delivered(self, notification_id: str) -> Notification:
        return self._transition(
            notification_id,
            DeliveryState.DELIVERED,
            delivered_at=self._clock(),
            next_retry_at=None,
        )

    def mark_failed(self, notification_id: str, reason: str) -> Notification:
        return self._transition(
            notification_id,
            DeliveryState.FAILED,
            failure_reason=reason,
            next_retry_at=None,
        )

    def apply_failure(
        self, notification_id: str, decision: RetryDecision
    ) -> Notification:
        return self._transition(
            notification_id,
            decision.status,
            retry_count=decision.retry_count,
            next_retry_at=decision.next_retry_at,
            failure_reason=decision.failure_reason,
        )

    def record_channel_delivery(
        self,
        notification_id: str,
        channel: Channel,
        provider_message_id: Optional[str] = None,
        chat_id: Optional[str] = None,
    ) -> Notification:
        current = self.get(notification_id)
        if current is None:
            raise KeyError(f"notification {notification_id} not found")

        changes: Dict[str, Any] = {}
        if channel not in current.delivered_channels:
            changes["delivered_channels"] = current.delivered_channels + (channel,)
        if provider_message_id is not None:
            changes["provider_message_id"] = provider_message_id
        if chat_id is not None:
            changes["chat_id"] = chat_id

        return self._put_transition(current, current.model_copy(update=changes))

    def list_for_hotel(self, hotel_id: str) -> List[Notification]:
        result = self.client.scan(
            table_name=self.table_name,
            FilterExpression="entity = :entity AND hotel_id = :hotel",
            ExpressionAttributeValues={
                ":entity": {"S": "notification"},
                ":hotel": {"S": hotel_id},
            },
        )
        if not result.is_success:
            raise NotificationStoreError(
                f"Failed to list notifications: {result.message}"
            )
        return [self._from_item(item) for item in result.data or []]
