"""Rule evaluation.

Walks every enabled expiry rule over the active inventory and turns batches
inside the rule's warning window into PENDING notification records, one per
(recipient, channel). Batches are only handled by the rule that is
effective for their location, so overlapping rules never double-alert.
"""

from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    Channel,
    Notification,
    NotificationRule,
    NotificationType,
    Priority,
    utcnow,
)
from infrastructure.notifications.store import NotificationStore
from infrastructure.persistence.chat_bindings import ChatBindingStore
from infrastructure.persistence.models import Batch, Recipient
from infrastructure.persistence.repositories import BatchRepository
from infrastructure.persistence.rules import RuleStore, enabled_rules
from integrations.telegram import TelegramClient
from modules.expiry.dedup import Deduplicator
from modules.expiry.messages import (
    format_batch_push,
    notification_message,
    notification_title,
)
from modules.expiry.recipients import RecipientResolver

logger = get_module_logger()


def classify(
    days_left: int, rule: NotificationRule
) -> Optional[Tuple[NotificationType, Priority]]:
    """Map days until expiry to a notification type and priority.

    Thresholds are inclusive and checked from most to least urgent.
    """
    if days_left <= 0:
        return NotificationType.EXPIRED, Priority.URGENT
    if days_left <= rule.critical_days:
        return NotificationType.EXPIRY_CRITICAL, Priority.HIGH
    if days_left <= rule.warning_days:
        return NotificationType.EXPIRY_WARNING, Priority.NORMAL
    return None


def effective_rule(
    rules: List[NotificationRule], hotel_id: str, department_id: Optional[str]
) -> Optional[NotificationRule]:
    """Most specific enabled rule for a location: department, hotel, system."""
    candidates = [r for r in rules if r.applies_to(hotel_id, department_id)]
    if not candidates:
        return None
    return max(candidates, key=lambda r: r.specificity)


class RuleEvaluator:
    """Creates notification records from rules and inventory.

    Attributes:
        rules: Rule storage
        batches: Active inventory
        resolver: Recipient selection per rule
        dedup: Fingerprint duplicate check
        store: Destination for new records
        chat_bindings: Group chats linked to hotels and departments
        telegram: Gateway for group chat pushes; pushes are skipped when None
    """

    def __init__(
        self,
        rules: RuleStore,
        batches: BatchRepository,
        resolver: RecipientResolver,
        dedup: Deduplicator,
        store: NotificationStore,
        chat_bindings: ChatBindingStore,
        telegram: Optional[TelegramClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.rules = rules
        self.batches = batches
        self.resolver = resolver
        self.dedup = dedup
        self.store = store
        self.chat_bindings = chat_bindings
        self.telegram = telegram
        self._clock = clock

    def evaluate(self) -> int:
        """Evaluate every enabled expiry rule.

        Returns:
            Number of notification records created
        """
        rules = enabled_rules(self.rules)
        logger.info("rule_evaluation_started", rule_count=len(rules))

        today = self._clock().date()
        total = 0
        for rule in rules:
            try:
                total += self.process_rule(rule, rules, today)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "rule_evaluation_failed",
                    rule_id=rule.id,
                    error=str(e),
                    exc_info=True,
                )

        logger.info("rule_evaluation_completed", notifications_created=total)
        return total

    def process_rule(
        self, rule: NotificationRule, rules: List[NotificationRule], today: date
    ) -> int:
        created = 0
        recipients: Optional[List[Recipient]] = None

        for batch in self.batches.list_active_batches(rule.hotel_id, rule.department_id):
            days_left = batch.days_left(today)
            if days_left is None or days_left > rule.warning_days:
                continue

            winner = effective_rule(rules, batch.hotel_id, batch.department_id)
            if winner is None or winner.id != rule.id:
                continue

            classification = classify(days_left, rule)
            if classification is None:
                continue
            type_, priority = classification

            if recipients is None:
                recipients = self.resolver.resolve(rule)

            try:
                created += self.notify_recipients(
                    rule, batch, type_, priority, days_left, recipients
                )
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "batch_notification_failed",
                    rule_id=rule.id,
                    batch_id=batch.id,
                    error=str(e),
                    exc_info=True,
                )

            if Channel.CHAT in rule.channels:
                self.push_to_linked_chats(batch, type_, days_left)

        return created

    def notify_recipients(
        self,
        rule: NotificationRule,
        batch: Batch,
        type_: NotificationType,
        priority: Priority,
        days_left: int,
        recipients: List[Recipient],
    ) -> int:
        created = 0
        for user in recipients:
            if user.hotel_id and user.hotel_id != batch.hotel_id:
                continue
            for channel in rule.channels:
                if self.dedup.is_duplicate(batch.id, user.id, channel):
                    continue

                notification = Notification(
                    hotel_id=batch.hotel_id,
                    user_id=user.id,
                    batch_id=batch.id,
                    rule_id=rule.id,
                    type=type_,
                    title=notification_title(type_, batch),
                    message=notification_message(type_, batch, days_left),
                    data=batch_facts(batch, days_left),
                    channels=(channel,),
                    priority=priority,
                    fingerprint=self.dedup.fingerprint(batch.id, user.id, channel),
                    chat_id=user.telegram_chat_id if channel == Channel.CHAT else None,
                    created_at=self._clock(),
                )
                if self.store.create(notification):
                    created += 1
        return created

    def push_to_linked_chats(
        self, batch: Batch, type_: NotificationType, days_left: int
    ) -> int:
        """Send one aggregated batch message to every matching group chat.

        Returns:
            Number of chats the message reached
        """
        if self.telegram is None:
            logger.debug("chat_push_skipped_no_gateway", batch_id=batch.id)
            return 0

        sent = 0
        text = format_batch_push(batch, type_, days_left)
        for binding in self.chat_bindings.list_all():
            if not binding.matches_location(batch.hotel_id, batch.department_id):
                continue
            try:
                result = self.telegram.send_message(
                    binding.chat_id,
                    text,
                    disable_notification=binding.silent_mode,
                )
                if not result.is_success:
                    logger.warning(
                        "chat_push_failed",
                        chat_id=binding.chat_id,
                        batch_id=batch.id,
                        error=result.message,
                    )
                    continue
                self.chat_bindings.touch(binding.chat_id, self._clock())
                sent += 1
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "chat_push_exception",
                    chat_id=binding.chat_id,
                    batch_id=batch.id,
                    error=str(e),
                )
        return sent


def batch_facts(batch: Batch, days_left: int) -> dict:
    return {
        "batchId": batch.id,
        "productName": batch.product_name,
        "departmentName": batch.department_name,
        "quantity": batch.quantity,
        "unit": batch.unit,
        "expiryDate": batch.expiry_date.isoformat() if batch.expiry_date else None,
        "daysLeft": days_left,
    }
