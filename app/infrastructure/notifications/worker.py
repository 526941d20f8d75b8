"""Delivery worker.

Drains due notification records through the channel dispatcher and drives
the delivery state machine:

    PENDING -> SENDING -> DELIVERED
    SENDING -> RETRY -> SENDING -> ... -> FAILED
    PENDING/RETRY -> FAILED ("already resolved") when the batch is gone
"""

from datetime import datetime
from typing import Callable, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.dispatcher import ChannelDispatcher
from infrastructure.notifications.errors import AlreadyResolved, InvalidTransition
from infrastructure.notifications.models import DeliveryState, Notification, utcnow
from infrastructure.notifications.retry import RetryPolicy
from infrastructure.notifications.store import NotificationStore
from infrastructure.persistence.repositories import BatchRepository

logger = get_module_logger()

ALREADY_RESOLVED = "already resolved"


class DeliveryWorker:
    """Worker for processing batches of due notification records.

    This worker handles the mechanics of delivery:
    - Fetching due records from the store
    - Short-circuiting records whose batch was collected or written off
    - Dispatching every channel not yet delivered
    - Applying the retry policy to failed attempts

    Records are processed sequentially. Only one worker may run per
    deployment.

    Attributes:
        store: NotificationStore holding the records
        dispatcher: ChannelDispatcher for channel delivery
        batches: Lookup for the current batch status
        policy: RetryPolicy controlling backoff
        batch_size: Maximum records per sweep
    """

    def __init__(
        self,
        store: NotificationStore,
        dispatcher: ChannelDispatcher,
        batches: BatchRepository,
        policy: Optional[RetryPolicy] = None,
        batch_size: int = 100,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self.batches = batches
        self.policy = policy or RetryPolicy()
        self.batch_size = batch_size
        self._clock = clock

    def process_queue(self) -> dict:
        """Process one sweep of due records.

        Returns:
            Dictionary with processing statistics:
                - processed: Records attempted
                - delivered: Records that reached DELIVERED
                - retried: Records rescheduled (RETRY)
                - failed: Records that reached FAILED
                - skipped: Records that changed state under us

        Example:
            stats = worker.process_queue()
            logger.info("sweep_complete", **stats)
        """
        stats = {
            "processed": 0,
            "delivered": 0,
            "retried": 0,
            "failed": 0,
            "skipped": 0,
        }

        records = self.store.fetch_due(limit=self.batch_size)
        if not records:
            logger.debug("delivery_sweep_no_records")
            return stats

        logger.info("delivery_sweep_start", record_count=len(records))

        for record in records:
            try:
                outcome = self._process_record(record)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "delivery_record_exception",
                    notification_id=record.id,
                    error=str(e),
                    exc_info=True,
                )
                try:
                    outcome = self._fail_attempt(record, f"Unhandled exception: {e}")
                except Exception as fail_error:  # pylint: disable=broad-except
                    # Store unreachable; the record stays due for the next sweep
                    logger.error(
                        "delivery_record_failure_not_recorded",
                        notification_id=record.id,
                        error=str(fail_error),
                    )
                    outcome = None

            if outcome is None:
                stats["skipped"] += 1
                continue

            stats["processed"] += 1
            if outcome == DeliveryState.DELIVERED:
                stats["delivered"] += 1
            elif outcome == DeliveryState.RETRY:
                stats["retried"] += 1
            elif outcome == DeliveryState.FAILED:
                stats["failed"] += 1

        logger.info("delivery_sweep_complete", **stats)
        return stats

    def _check_batch(self, record: Notification) -> None:
        if not record.batch_id:
            return
        batch = self.batches.get_batch(record.batch_id)
        if batch is not None and batch.status.is_resolved:
            raise AlreadyResolved(f"batch {record.batch_id} is {batch.status.value}")

    def _process_record(self, record: Notification) -> Optional[DeliveryState]:
        """Process a single record.

        Returns:
            The record's new state, or None if it was no longer due
        """
        current = self.store.get(record.id)
        if current is None or not current.is_due(self._clock()):
            logger.debug("delivery_record_skipped", notification_id=record.id)
            return None

        try:
            self._check_batch(current)
        except AlreadyResolved as e:
            try:
                self.store.mark_failed(current.id, ALREADY_RESOLVED)
            except InvalidTransition:
                logger.info("delivery_record_claimed_elsewhere", notification_id=current.id)
                return None
            logger.info(
                "delivery_record_already_resolved",
                notification_id=current.id,
                batch_id=current.batch_id,
                detail=str(e),
            )
            return DeliveryState.FAILED

        try:
            self.store.mark_sending(current.id)
        except InvalidTransition:
            # Another sweep claimed the record between our read and the claim
            logger.info("delivery_record_claimed_elsewhere", notification_id=current.id)
            return None
        logger.info(
            "delivery_record_processing",
            notification_id=current.id,
            attempt=current.retry_count + 1,
            channels=[c.value for c in current.pending_channels],
        )

        try:
            for channel in current.pending_channels:
                result = self.dispatcher.dispatch(current, channel)
                current = self.store.record_channel_delivery(
                    current.id,
                    channel,
                    provider_message_id=result.get("provider_message_id"),
                    chat_id=result.get("chat_id"),
                )
        except Exception as e:  # pylint: disable=broad-except
            return self._fail_attempt(current, str(e))

        self.store.mark_delivered(current.id)
        logger.info("delivery_record_delivered", notification_id=current.id)
        return DeliveryState.DELIVERED

    def _fail_attempt(self, record: Notification, cause: str) -> Optional[DeliveryState]:
        latest = self.store.get(record.id)
        if latest is None or latest.status != DeliveryState.SENDING:
            return None

        decision = self.policy.on_failure(latest.retry_count, cause, self._clock())
        self.store.apply_failure(latest.id, decision)

        if decision.status == DeliveryState.RETRY:
            logger.info(
                "delivery_record_rescheduled",
                notification_id=latest.id,
                retry_count=decision.retry_count,
                next_retry_at=decision.next_retry_at.isoformat()
                if decision.next_retry_at
                else None,
                cause=cause,
            )
        else:
            logger.warning(
                "delivery_record_failed",
                notification_id=latest.id,
                retry_count=decision.retry_count,
                reason=decision.failure_reason,
            )
        return decision.status
