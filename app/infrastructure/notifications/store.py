"""Notification record storage.

This module provides the storage interface and the in-memory implementation
for notification records. The protocol-based design allows for multiple
storage backends (in-memory, DynamoDB).

Stores own two guarantees:
- ``create`` is atomic with respect to the dedup fingerprint: a second live
  record with the same fingerprint inside the dedup window is refused.
- Status changes follow the delivery state machine; an illegal change raises
  InvalidTransition.
"""

import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import InvalidTransition
from infrastructure.notifications.models import (
    Channel,
    DeliveryState,
    Notification,
    utcnow,
)
from infrastructure.notifications.retry import RetryDecision

logger = get_module_logger()


class NotificationStore(Protocol):
    """Storage interface for notification records.

    Methods:
        create: Persist a new PENDING record unless its fingerprint is live
        has_recent_fingerprint: Dedup lookup within the window
        get: Load one record
        fetch_due: Records ready for a delivery attempt
        mark_sending / mark_delivered / mark_failed / apply_failure: transitions
        record_channel_delivery: Persist a per-channel success
        list_for_hotel: History for statistics
    """

    def create(self, notification: Notification) -> bool:
        """Persist a new record.

        Returns:
            True if created, False if a live record with the same fingerprint
            was created within the dedup window
        """
        ...

    def has_recent_fingerprint(self, fingerprint: str) -> bool:
        """True if a non-failed record with this fingerprint is inside the window."""
        ...

    def get(self, notification_id: str) -> Optional[Notification]: ...

    def fetch_due(self, limit: int = 100) -> List[Notification]:
        """Return PENDING/RETRY records whose next_retry_at is null or past.

        Ordered by priority descending, then created_at ascending.
        """
        ...

    def mark_sending(self, notification_id: str) -> Notification: ...

    def mark_delivered(self, notification_id: str) -> Notification: ...

    def mark_failed(self, notification_id: str, reason: str) -> Notification: ...

    def apply_failure(
        self, notification_id: str, decision: RetryDecision
    ) -> Notification:
        """Persist a RETRY or FAILED decision from the retry policy."""
        ...

    def record_channel_delivery(
        self,
        notification_id: str,
        channel: Channel,
        provider_message_id: Optional[str] = None,
        chat_id: Optional[str] = None,
    ) -> Notification: ...

    def list_for_hotel(self, hotel_id: str) -> List[Notification]: ...


def due_sort_key(notification: Notification):
    return (-int(notification.priority), notification.created_at)


class InMemoryNotificationStore:
    """In-memory implementation of NotificationStore.

    Thread-safe store suitable for single-instance deployments, development
    and tests. Records are kept forever; only their status changes.

    Attributes:
        dedup_window: Rolling window for fingerprint uniqueness
    """

    def __init__(
        self,
        dedup_window_hours: int = 24,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store: Dict[str, Notification] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self.dedup_window = timedelta(hours=dedup_window_hours)

    def _has_recent_fingerprint_locked(self, fingerprint: str) -> bool:
        since = self._clock() - self.dedup_window
        return any(
            record.fingerprint == fingerprint
            and record.status != DeliveryState.FAILED
            and record.created_at > since
            for record in self._store.values()
        )

    def create(self, notification: Notification) -> bool:
        with self._lock:
            if notification.fingerprint and self._has_recent_fingerprint_locked(
                notification.fingerprint
            ):
                logger.debug(
                    "notification_duplicate_refused",
                    fingerprint=notification.fingerprint,
                    batch_id=notification.batch_id,
                )
                return False

            self._store[notification.id] = notification.model_copy(deep=True)
            logger.info(
                "notification_created",
                notification_id=notification.id,
                type=notification.type.value,
                channels=[c.value for c in notification.channels],
                priority=int(notification.priority),
            )
            return True

    def has_recent_fingerprint(self, fingerprint: str) -> bool:
        with self._lock:
            return self._has_recent_fingerprint_locked(fingerprint)

    def get(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            record = self._store.get(notification_id)
            return record.model_copy(deep=True) if record else None

    def fetch_due(self, limit: int = 100) -> List[Notification]:
        with self._lock:
            now = self._clock()
            due = [r for r in self._store.values() if r.is_due(now)]
            due.sort(key=due_sort_key)

            logger.debug(
                "fetched_due_notifications",
                count=min(len(due), limit),
                total_store_size=len(self._store),
            )
            return [r.model_copy(deep=True) for r in due[:limit]]

    def _transition_locked(
        self, notification_id: str, target: DeliveryState, **changes
    ) -> Notification:
        record = self._store.get(notification_id)
        if record is None:
            raise KeyError(f"notification {notification_id} not found")
        if not record.status.can_transition_to(target):
            raise InvalidTransition(notification_id, record.status.value, target.value)

        updated = record.model_copy(update={"status": target, **changes})
        self._store[notification_id] = updated
        return updated.model_copy(deep=True)

    def mark_sending(self, notification_id: str) -> Notification:
        with self._lock:
            return self._transition_locked(notification_id, DeliveryState.SENDING)

    def mark_delivered(self, notification_id: str) -> Notification:
        with self._lock:
            return self._transition_locked(
                notification_id,
                DeliveryState.DELIVERED,
                delivered_at=self._clock(),
                next_retry_at=None,
            )

    def mark_failed(self, notification_id: str, reason: str) -> Notification:
        with self._lock:
            return self._transition_locked(
                notification_id,
                DeliveryState.FAILED,
                failure_reason=reason,
                next_retry_at=None,
            )

    def apply_failure(
        self, notification_id: str, decision: RetryDecision
    ) -> Notification:
        with self._lock:
            return self._transition_locked(
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
        with self._lock:
            record = self._store.get(notification_id)
            if record is None:
                raise KeyError(f"notification {notification_id} not found")

            changes: dict = {}
            if channel not in record.delivered_channels:
                changes["delivered_channels"] = record.delivered_channels + (channel,)
            if provider_message_id is not None:
                changes["provider_message_id"] = provider_message_id
            if chat_id is not None:
                changes["chat_id"] = chat_id

            updated = record.model_copy(update=changes)
            self._store[notification_id] = updated
            return updated.model_copy(deep=True)

    def list_for_hotel(self, hotel_id: str) -> List[Notification]:
        with self._lock:
            return [
                r.model_copy(deep=True)
                for r in self._store.values()
                if r.hotel_id == hotel_id
            ]

