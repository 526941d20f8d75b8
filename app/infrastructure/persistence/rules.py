"""Notification rule storage.

Rules are keyed by scope: at most one rule exists per
(hotel_id, department_id, type). Saving a rule for an existing scope
replaces it in place and keeps the original id and created_at.
"""

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import NotificationRule, RuleType, utcnow

logger = get_module_logger()

ScopeKey = Tuple[Optional[str], Optional[str], str]


class RuleStore(Protocol):
    def list_rules(self) -> List[NotificationRule]: ...

    def get_by_scope(self, scope_key: ScopeKey) -> Optional[NotificationRule]: ...

    def save(self, rule: NotificationRule) -> NotificationRule:
        """Insert or replace the rule for its scope. Returns the stored rule."""
        ...


def rule_order_key(rule: NotificationRule):
    """System rules first, then hotel rules, then department rules."""
    return (
        rule.hotel_id is not None,
        rule.hotel_id or "",
        rule.department_id is not None,
        rule.department_id or "",
        rule.type.value,
    )


class InMemoryRuleStore:
    """Thread-safe in-memory rule store."""

    def __init__(self) -> None:
        self._rules: Dict[ScopeKey, NotificationRule] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_seed_file(cls, path: str) -> "InMemoryRuleStore":
        """Load the ``rules`` array of a catalog seed file."""
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        store = cls()
        for item in payload.get("rules", []):
            store.save(NotificationRule.model_validate(item))
        return store

    def list_rules(self) -> List[NotificationRule]:
        with self._lock:
            rules = [r.model_copy() for r in self._rules.values()]
        return sorted(rules, key=rule_order_key)

    def get_by_scope(self, scope_key: ScopeKey) -> Optional[NotificationRule]:
        with self._lock:
            rule = self._rules.get(scope_key)
            return rule.model_copy() if rule else None

    def save(self, rule: NotificationRule) -> NotificationRule:
        with self._lock:
            existing = self._rules.get(rule.scope_key)
            if existing is not None:
                rule = rule.model_copy(
                    update={
                        "id": existing.id,
                        "created_at": existing.created_at,
                        "updated_at": utcnow(),
                    }
                )
            self._rules[rule.scope_key] = rule
        logger.info(
            "notification_rule_saved",
            rule_id=rule.id,
            hotel_id=rule.hotel_id,
            department_id=rule.department_id,
            type=rule.type.value,
            replaced=existing is not None,
        )
        return rule.model_copy()


def enabled_rules(store: RuleStore, rule_type: RuleType = RuleType.EXPIRY) -> List[NotificationRule]:
    return [r for r in store.list_rules() if r.enabled and r.type == rule_type]
