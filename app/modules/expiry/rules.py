"""Rule administration and notification statistics."""

from collections import Counter
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    Channel,
    ChannelSet,
    NotificationRule,
    Role,
    RoleSet,
    RuleType,
)
from infrastructure.notifications.store import NotificationStore
from infrastructure.persistence.rules import RuleStore

logger = get_module_logger()


class RuleUpsert(BaseModel):
    """Payload for creating or replacing the rule of one scope."""

    id: Optional[str] = None
    hotel_id: Optional[str] = None
    department_id: Optional[str] = None
    type: RuleType = RuleType.EXPIRY
    name: str = "Expiry rule"
    description: Optional[str] = None
    warning_days: int = Field(default=7, ge=0)
    critical_days: int = Field(default=3, ge=0)
    channels: ChannelSet = (Channel.APP,)
    recipient_roles: RoleSet = frozenset({Role.HOTEL_ADMIN, Role.DEPARTMENT_MANAGER})
    enabled: bool = True


class StatsRow(BaseModel):
    status: str
    type: str
    date: date
    count: int


class RuleService:
    """Administration of notification rules and delivery statistics.

    Rules are unique per (hotel, department, type). Saving a rule for an
    existing scope replaces it.
    """

    def __init__(self, rules: RuleStore, notifications: NotificationStore):
        self.rules = rules
        self.notifications = notifications

    def get_rules(self, hotel_id: Optional[str] = None) -> List[NotificationRule]:
        """Enabled rules, system rules first.

        With a hotel, returns that hotel's rules plus system rules.
        """
        return [
            r
            for r in self.rules.list_rules()
            if r.enabled and (hotel_id is None or r.hotel_id in (None, hotel_id))
        ]

    def upsert_rule(self, payload: RuleUpsert) -> NotificationRule:
        """Create or replace the rule for the payload's scope.

        Raises:
            pydantic.ValidationError: If thresholds or scope are inconsistent
        """
        data = payload.model_dump(exclude_none=True)
        rule = NotificationRule.model_validate(data)
        saved = self.rules.save(rule)
        logger.info(
            "notification_rule_upserted",
            rule_id=saved.id,
            hotel_id=saved.hotel_id,
            department_id=saved.department_id,
            warning_days=saved.warning_days,
            critical_days=saved.critical_days,
            channels=[c.value for c in saved.channels],
        )
        return saved

    def get_stats(
        self,
        hotel_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[StatsRow]:
        """Notification counts grouped by status, type and creation date.

        Newest dates first.
        """
        counts: Counter = Counter()
        for record in self.notifications.list_for_hotel(hotel_id):
            day = record.created_at.date()
            if start_date and day < start_date:
                continue
            if end_date and day > end_date:
                continue
            counts[(record.status.value, record.type.value, day)] += 1

        rows = [
            StatsRow(status=status, type=type_, date=day, count=count)
            for (status, type_, day), count in counts.items()
        ]
        rows.sort(key=lambda r: (r.date, r.status, r.type), reverse=True)
        return rows
