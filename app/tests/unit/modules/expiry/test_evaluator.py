"""Unit tests for rule evaluation."""

from unittest.mock import patch

import pytest

from infrastructure.notifications.models import (
    Channel,
    NotificationType,
    Priority,
    Role,
)
from infrastructure.persistence.models import BatchStatus
from modules.expiry import Deduplicator, RecipientResolver, RuleEvaluator
from modules.expiry.evaluator import classify, effective_rule


@pytest.fixture
def evaluator(
    rule_store, catalog, notification_store, chat_binding_store, mock_telegram, clock
):
    return RuleEvaluator(
        rules=rule_store,
        batches=catalog,
        resolver=RecipientResolver(catalog),
        dedup=Deduplicator(notification_store, clock=clock),
        store=notification_store,
        chat_bindings=chat_binding_store,
        telegram=mock_telegram,
        clock=clock,
    )


@pytest.mark.unit
class TestClassify:
    @pytest.mark.parametrize(
        "days_left, expected",
        [
            (-3, (NotificationType.EXPIRED, Priority.URGENT)),
            (0, (NotificationType.EXPIRED, Priority.URGENT)),
            (1, (NotificationType.EXPIRY_CRITICAL, Priority.HIGH)),
            (3, (NotificationType.EXPIRY_CRITICAL, Priority.HIGH)),
            (4, (NotificationType.EXPIRY_WARNING, Priority.NORMAL)),
            (7, (NotificationType.EXPIRY_WARNING, Priority.NORMAL)),
            (8, None),
        ],
    )
    def test_thresholds_are_inclusive(self, rule_factory, days_left, expected):
        assert classify(days_left, rule_factory()) == expected

    def test_equal_thresholds_prefer_critical(self, rule_factory):
        rule = rule_factory(warning_days=3, critical_days=3)

        assert classify(3, rule) == (NotificationType.EXPIRY_CRITICAL, Priority.HIGH)


@pytest.mark.unit
class TestEffectiveRule:
    def test_most_specific_rule_wins(self, rule_factory):
        system = rule_factory()
        hotel = rule_factory(id="rule-hotel", hotel_id="hotel-1")
        department = rule_factory(
            id="rule-dept", hotel_id="hotel-1", department_id="dept-1"
        )
        rules = [system, hotel, department]

        assert effective_rule(rules, "hotel-1", "dept-1").id == "rule-dept"
        assert effective_rule(rules, "hotel-1", "dept-2").id == "rule-hotel"
        assert effective_rule(rules, "hotel-2", None).id == "rule-system"

    def test_no_matching_rule(self, rule_factory):
        rule = rule_factory(hotel_id="hotel-2")

        assert effective_rule([rule], "hotel-1", None) is None


@pytest.mark.unit
class TestEvaluate:
    def test_creates_one_record_per_recipient(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory, notification_store
    ):
        rule_store.save(rule_factory())
        catalog.add_batch(batch_factory(expires_in=5))

        assert evaluator.evaluate() == 2

        records = notification_store.fetch_due()
        assert {r.user_id for r in records} == {"user-1", "user-2"}
        record = records[0]
        assert record.type == NotificationType.EXPIRY_WARNING
        assert record.priority == Priority.NORMAL
        assert record.title == "Скоро истекает: Молоко"
        assert record.message == 'Партия "Молоко" (12 л) истекает через 5 дн.'
        assert record.data["daysLeft"] == 5
        assert record.data["expiryDate"] == "2026-10-23"
        assert record.fingerprint

    def test_second_run_is_deduplicated(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory
    ):
        rule_store.save(rule_factory())
        catalog.add_batch(batch_factory(expires_in=2))

        assert evaluator.evaluate() == 2
        assert evaluator.evaluate() == 0

    def test_next_day_alerts_again(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory, clock
    ):
        rule_store.save(rule_factory())
        catalog.add_batch(batch_factory(expires_in=2))
        evaluator.evaluate()

        clock.advance(days=1)

        assert evaluator.evaluate() == 2

    def test_batch_outside_window_is_ignored(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory
    ):
        rule_store.save(rule_factory())
        catalog.add_batch(batch_factory(expires_in=8))
        catalog.add_batch(batch_factory(id="batch-2", expires_in=None))

        assert evaluator.evaluate() == 0

    def test_resolved_batches_are_not_evaluated(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory
    ):
        rule_store.save(rule_factory())
        catalog.add_batch(batch_factory(expires_in=1))
        catalog.set_batch_status("batch-1", BatchStatus.COLLECTED)

        assert evaluator.evaluate() == 0

    def test_disabled_rule_is_skipped(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory
    ):
        rule_store.save(rule_factory(enabled=False))
        catalog.add_batch(batch_factory(expires_in=1))

        assert evaluator.evaluate() == 0

    def test_overlapping_rules_alert_once(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory, notification_store
    ):
        rule_store.save(rule_factory())
        rule_store.save(
            rule_factory(
                id="rule-hotel",
                hotel_id="hotel-1",
                warning_days=10,
                critical_days=6,
            )
        )
        catalog.add_batch(batch_factory(expires_in=5))

        assert evaluator.evaluate() == 2

        records = notification_store.fetch_due()
        assert {r.rule_id for r in records} == {"rule-hotel"}
        assert {r.type for r in records} == {NotificationType.EXPIRY_CRITICAL}

    def test_record_per_channel(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory, notification_store
    ):
        rule_store.save(rule_factory(channels=[Channel.APP, Channel.EMAIL]))
        catalog.add_batch(batch_factory(expires_in=0))

        assert evaluator.evaluate() == 4

        records = notification_store.fetch_due()
        assert all(len(r.channels) == 1 for r in records)
        assert {r.type for r in records} == {NotificationType.EXPIRED}
        assert {r.priority for r in records} == {Priority.URGENT}

    def test_recipient_from_other_hotel_is_skipped(
        self, evaluator, rule_store, rule_factory, catalog, batch_factory, user_factory
    ):
        catalog.add_user(user_factory(id="user-9", hotel_id="hotel-2"))
        rule_store.save(rule_factory(recipient_roles=[Role.HOTEL_ADMIN]))
        catalog.add_batch(batch_factory(expires_in=3))

        assert evaluator.evaluate() == 1

    def test_chat_rule_pushes_to_linked_chats(
        self,
        evaluator,
        rule_store,
        rule_factory,
        catalog,
        batch_factory,
        chat_binding_store,
        chat_binding_factory,
        mock_telegram,
        notification_store,
        clock,
    ):
        chat_binding_store.upsert(chat_binding_factory(silent_mode=True))
        chat_binding_store.upsert(chat_binding_factory(chat_id=-2, hotel_id="hotel-2"))
        rule_store.save(rule_factory(channels=[Channel.CHAT]))
        catalog.add_batch(batch_factory(expires_in=1))

        evaluator.evaluate()

        mock_telegram.send_message.assert_called_once()
        args, kwargs = mock_telegram.send_message.call_args
        assert args[0] == -100500
        assert "🚨 *КРИТИЧНО*" in args[1]
        assert kwargs["disable_notification"] is True
        assert chat_binding_store.get(-100500).last_message_at == clock()

        chat_ids = {r.user_id: r.chat_id for r in notification_store.fetch_due()}
        assert chat_ids == {"user-1": "1001", "user-2": None}

    def test_chat_push_failure_does_not_stop_records(
        self,
        evaluator,
        rule_store,
        rule_factory,
        catalog,
        batch_factory,
        chat_binding_store,
        chat_binding_factory,
        mock_telegram,
    ):
        mock_telegram.send_message.side_effect = RuntimeError("network")
        chat_binding_store.upsert(chat_binding_factory())
        rule_store.save(rule_factory(channels=[Channel.CHAT]))
        catalog.add_batch(batch_factory(expires_in=1))

        assert evaluator.evaluate() == 2

    def test_rule_failure_is_isolated(self, evaluator, rule_store, rule_factory):
        rule_store.save(rule_factory())
        rule_store.save(rule_factory(id="rule-hotel", hotel_id="hotel-1"))

        with patch.object(
            evaluator, "process_rule", side_effect=[RuntimeError("boom"), 3]
        ):
            assert evaluator.evaluate() == 3
