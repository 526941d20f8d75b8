"""Recipient resolution for notification rules."""

from typing import List

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import HOTEL_WIDE_ROLES, NotificationRule
from infrastructure.persistence.models import Recipient
from infrastructure.persistence.repositories import UserRepository

logger = get_module_logger()


class RecipientResolver:
    """Select the users a rule notifies.

    - Active users of the rule's hotel (every hotel for a system rule)
    - Whose role is one of the rule's recipient roles
    - For a department rule: members of that department, plus users holding
      a hotel-wide role
    """

    def __init__(self, users: UserRepository):
        self.users = users

    def resolve(self, rule: NotificationRule) -> List[Recipient]:
        recipients = []
        for user in self.users.list_active_users(rule.hotel_id):
            if user.role not in rule.recipient_roles:
                continue
            if rule.department_id and not (
                user.department_id == rule.department_id
                or user.role in HOTEL_WIDE_ROLES
            ):
                continue
            recipients.append(user)

        logger.debug(
            "recipients_resolved",
            rule_id=rule.id,
            recipient_count=len(recipients),
        )
        return recipients
