"""Notification deduplication.

An alert about one batch is sent at most once per recipient, channel and
calendar day. Records that ended FAILED do not block a new alert.
"""

from datetime import date, datetime
from typing import Callable, Optional

from infrastructure.idempotency import FingerprintBuilder
from infrastructure.notifications.models import Channel, utcnow
from infrastructure.notifications.store import NotificationStore


class Deduplicator:
    """Fingerprint-based duplicate check backed by the notification store.

    The check is advisory: ``NotificationStore.create`` enforces the same
    fingerprint atomically, so a racing creation is refused there.
    """

    def __init__(
        self,
        store: NotificationStore,
        builder: Optional[FingerprintBuilder] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.builder = builder or FingerprintBuilder()
        self._clock = clock

    def today(self) -> date:
        return self._clock().date()

    def fingerprint(
        self, batch_id: Optional[str], recipient_id: Optional[str], channel: Channel
    ) -> str:
        return self.builder.build(batch_id, recipient_id, channel.value, self.today())

    def is_duplicate(
        self, batch_id: Optional[str], recipient_id: Optional[str], channel: Channel
    ) -> bool:
        return self.store.has_recent_fingerprint(
            self.fingerprint(batch_id, recipient_id, channel)
        )
