"""Unit tests for the daily report."""

from datetime import datetime, timezone

import pytest

from infrastructure.operations import OperationResult
from infrastructure.persistence.models import Collection
from modules.reports import DailyReportAggregator, aggregate


@pytest.fixture
def aggregator(catalog, chat_binding_store, mock_telegram, mock_resend, clock):
    return DailyReportAggregator(
        catalog=catalog,
        chat_bindings=chat_binding_store,
        telegram=mock_telegram,
        resend=mock_resend,
        default_template="{department}|{total}|{warning}|{expired}",
        sender="system@example.com",
        app_url="http://app",
        clock=clock,
    )


@pytest.fixture
def stocked(catalog, batch_factory):
    catalog.add_batch(batch_factory(id="b-1", expires_in=-1))
    catalog.add_batch(batch_factory(id="b-2", expires_in=0))
    catalog.add_batch(batch_factory(id="b-3", expires_in=7))
    catalog.add_batch(batch_factory(id="b-4", expires_in=8))
    catalog.add_batch(batch_factory(id="b-5", expires_in=None))
    return catalog


@pytest.mark.unit
class TestAggregate:
    def test_counts_by_urgency(self, stocked, today):
        stats = aggregate(stocked.list_active_batches("hotel-1"), today, 7, 20)

        assert (stats.total, stats.warning, stats.expired, stats.good) == (5, 2, 1, 2)
        assert [b.id for b in stats.expiring] == ["b-2", "b-3"]
        assert [b.id for b in stats.expired_batches] == ["b-1"]

    def test_lists_are_truncated(self, stocked, today):
        stats = aggregate(stocked.list_active_batches("hotel-1"), today, 7, 1)

        assert stats.warning == 2
        assert len(stats.expiring) == 1


@pytest.mark.unit
class TestChatReports:
    def test_sends_to_bound_chats(
        self, aggregator, stocked, chat_binding_store, chat_binding_factory, mock_telegram, clock
    ):
        chat_binding_store.upsert(chat_binding_factory(department_id="dept-1"))
        chat_binding_store.upsert(chat_binding_factory(chat_id=-7, hotel_id=None))

        result = aggregator.run()

        assert result["telegramSent"] == 1
        mock_telegram.send_message.assert_called_once_with(
            -100500, "Кухня|5|2|1", disable_notification=False
        )
        assert chat_binding_store.get(-100500).last_message_at == clock()

    def test_hotel_template_overrides_default(
        self, aggregator, stocked, chat_binding_store, chat_binding_factory, mock_telegram
    ):
        stocked.set_setting(
            "notify.templates", '{"dailyReport": "Итого {total}"}', hotel_id="hotel-1"
        )
        chat_binding_store.upsert(chat_binding_factory())

        aggregator.run()

        assert mock_telegram.send_message.call_args.args[1] == "Итого 5"

    def test_ten_batch_summary_is_sent_once(
        self, aggregator, catalog, batch_factory, chat_binding_store, chat_binding_factory,
        mock_telegram,
    ):
        for i, days in enumerate([30] * 6 + [1, 2, 3] + [-2]):
            catalog.add_batch(batch_factory(id=f"batch-{i}", expires_in=days))
        catalog.set_setting(
            "notify.templates",
            '{"dailyReport": "✅{good} ⚠️{warning} 🔴{expired}"}',
            hotel_id="hotel-1",
        )
        chat_binding_store.upsert(chat_binding_factory())

        result = aggregator.run()

        assert result["telegramSent"] == 1
        mock_telegram.send_message.assert_called_once()
        assert mock_telegram.send_message.call_args.args[1] == "✅6 ⚠️3 🔴1"

    def test_telegram_disabled_for_hotel(
        self, aggregator, stocked, chat_binding_store, chat_binding_factory, mock_telegram
    ):
        stocked.set_setting("notify.channels.telegram", "false", hotel_id="hotel-1")
        chat_binding_store.upsert(chat_binding_factory())

        assert aggregator.run()["telegramSent"] == 0
        mock_telegram.send_message.assert_not_called()

    def test_send_failure_is_not_counted(
        self, aggregator, stocked, chat_binding_store, chat_binding_factory, mock_telegram, today
    ):
        mock_telegram.send_message.return_value = OperationResult.permanent_error(
            "chat not found"
        )
        chat_binding_store.upsert(chat_binding_factory())

        assert aggregator.send_chat_reports(today) == 0

    def test_without_gateway(self, catalog, chat_binding_store, chat_binding_factory, today):
        chat_binding_store.upsert(chat_binding_factory())
        aggregator = DailyReportAggregator(
            catalog, chat_binding_store, None, None, "{total}", "s", "http://app"
        )

        assert aggregator.send_chat_reports(today) == 0
        assert aggregator.send_email_reports(today) == 0


@pytest.mark.unit
class TestEmailReports:
    def test_sends_to_department_inbox(self, aggregator, stocked, mock_resend):
        stocked.add_collection(
            Collection(
                department_id="dept-1",
                collected_at=datetime(2026, 10, 18, 1, 0, tzinfo=timezone.utc),
            )
        )

        result = aggregator.run()

        assert result["emailSent"] == 1
        kwargs = mock_resend.send_email.call_args.kwargs
        assert kwargs["to"] == "kitchen@example.com"
        assert kwargs["subject"] == "FreshTrack: Ежедневный отчёт по инвентарю - 18.10.2026"
        assert "Кухня|5|2|1" in kwargs["text"]
        assert kwargs["text"].endswith("Списаний за сутки: 1")

    def test_department_without_inbox(
        self, aggregator, catalog, department_factory, mock_resend, today
    ):
        catalog.add_department(department_factory(email=None))

        assert aggregator.send_email_reports(today) == 0
        mock_resend.send_email.assert_not_called()

    def test_email_disabled_system_wide(self, aggregator, catalog, mock_resend, today):
        catalog.set_setting("notify.channels.email", '{"enabled": false}')

        assert aggregator.send_email_reports(today) == 0
        mock_resend.send_email.assert_not_called()

    def test_department_failure_is_isolated(
        self, aggregator, catalog, department_factory, mock_resend, today
    ):
        catalog.add_department(
            department_factory(id="dept-2", code="BAR", name="Бар", email="bar@example.com")
        )
        mock_resend.send_email.side_effect = [
            RuntimeError("boom"),
            OperationResult.success(data={"id": "email-2"}),
        ]

        assert aggregator.send_email_reports(today) == 1
