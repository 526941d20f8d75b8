"""Daily report aggregation.

Once a day every bound group chat gets a summary of its hotel or department
and every department with an inbox gets the same summary by email. Reports
are not deduplicated: each run sends one message per unit.
"""

from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import ChatBinding, utcnow
from infrastructure.persistence.chat_bindings import ChatBindingStore, list_active_bound
from infrastructure.persistence.models import Batch, Department
from infrastructure.persistence.repositories import Catalog
from infrastructure.persistence.setting_values import get_templates, is_channel_enabled
from integrations.resend import ResendClient
from integrations.telegram import TelegramClient
from modules.reports.templates import (
    ReportStats,
    render_report_email,
    render_template,
    report_subject,
)

logger = get_module_logger()


def aggregate(
    batches: List[Batch], today: date, warning_days: int, list_limit: int
) -> ReportStats:
    """Count batches by urgency.

    Expired means strictly past expiry; warning covers 0..warning_days.
    """
    stats = ReportStats(total=len(batches))
    for batch in batches:
        days_left = batch.days_left(today)
        if days_left is None:
            continue
        if days_left < 0:
            stats.expired += 1
            stats.expired_batches.append(batch)
        elif days_left <= warning_days:
            stats.warning += 1
            stats.expiring.append(batch)

    stats.expiring = stats.expiring[:list_limit]
    stats.expired_batches = stats.expired_batches[:list_limit]
    return stats


class DailyReportAggregator:
    """Builds and sends the daily report over chat and email.

    Attributes:
        catalog: Inventory, hotels, departments, settings and collections
        chat_bindings: Group chats to report to
        telegram: Chat gateway, chat reports are skipped when None
        resend: Email gateway, email reports are skipped when None
        default_template: Template used when a hotel has none
    """

    def __init__(
        self,
        catalog: Catalog,
        chat_bindings: ChatBindingStore,
        telegram: Optional[TelegramClient],
        resend: Optional[ResendClient],
        default_template: str,
        sender: str,
        app_url: str,
        email_enabled: bool = True,
        email_warning_days: int = 7,
        list_limit: int = 20,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.chat_bindings = chat_bindings
        self.telegram = telegram
        self.resend = resend
        self.default_template = default_template
        self.sender = sender
        self.app_url = app_url.rstrip("/")
        self.email_enabled = email_enabled
        self.email_warning_days = email_warning_days
        self.list_limit = list_limit
        self._clock = clock

    def template_for(self, hotel_id: Optional[str]) -> str:
        return get_templates(self.catalog, hotel_id).get("dailyReport") or self.default_template

    def run(self) -> Dict[str, int]:
        """Send the daily report.

        Returns:
            ``{"telegramSent": n, "emailSent": m}``
        """
        today = self._clock().date()
        result = {
            "telegramSent": self.send_chat_reports(today),
            "emailSent": self.send_email_reports(today),
        }
        logger.info("daily_report_completed", **result)
        return result

    # Chat

    def send_chat_reports(self, today: date) -> int:
        if self.telegram is None:
            logger.info("daily_report_chat_skipped", reason="telegram not configured")
            return 0

        sent = 0
        for binding in list_active_bound(self.chat_bindings):
            try:
                if self._send_chat_report(binding, today):
                    sent += 1
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "daily_report_chat_failed",
                    chat_id=binding.chat_id,
                    error=str(e),
                    exc_info=True,
                )
        return sent

    def _send_chat_report(self, binding: ChatBinding, today: date) -> bool:
        if not is_channel_enabled(self.catalog, "telegram", binding.hotel_id):
            logger.debug(
                "daily_report_chat_disabled",
                chat_id=binding.chat_id,
                hotel_id=binding.hotel_id,
            )
            return False

        batches = self.catalog.list_active_batches(binding.hotel_id, binding.department_id)
        stats = aggregate(batches, today, binding.warning_days, self.list_limit)

        department_name = ""
        if binding.department_id:
            department = self.catalog.get_department(binding.department_id)
            department_name = department.name if department else ""

        text = render_template(
            self.template_for(binding.hotel_id), stats, today, department_name
        )
        result = self.telegram.send_message(
            binding.chat_id, text, disable_notification=binding.silent_mode
        )
        if not result.is_success:
            logger.warning(
                "daily_report_chat_send_failed",
                chat_id=binding.chat_id,
                error=result.message,
            )
            return False

        self.chat_bindings.touch(binding.chat_id, self._clock())
        logger.info(
            "daily_report_chat_sent",
            chat_id=binding.chat_id,
            hotel_id=binding.hotel_id,
            department_id=binding.department_id,
            total=stats.total,
        )
        return True

    # Email

    def send_email_reports(self, today: date) -> int:
        if (
            not self.email_enabled
            or self.resend is None
            or not is_channel_enabled(self.catalog, "email")
        ):
            logger.info("daily_report_email_skipped", reason="email disabled")
            return 0

        sent = 0
        for department in self.catalog.list_departments():
            if not department.email:
                continue
            try:
                if self._send_email_report(department, today):
                    sent += 1
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "daily_report_email_failed",
                    department_id=department.id,
                    error=str(e),
                    exc_info=True,
                )
        return sent

    def _send_email_report(self, department: Department, today: date) -> bool:
        batches = self.catalog.list_active_batches(department.hotel_id, department.id)
        stats = aggregate(batches, today, self.email_warning_days, self.list_limit)
        stats.collections_today = self.catalog.count_collections(department.id, today)

        hotel = self.catalog.get_hotel(department.hotel_id)
        report_text = render_template(
            self.template_for(department.hotel_id), stats, today, department.name
        )
        html_body, text_body = render_report_email(
            report_text,
            stats,
            today,
            self.app_url,
            hotel_name=hotel.name if hotel else None,
            department_name=department.name,
        )
        result = self.resend.send_email(
            to=department.email,
            subject=report_subject(today),
            html=html_body,
            text=text_body,
            sender=self.sender,
        )
        if not result.is_success:
            logger.warning(
                "daily_report_email_send_failed",
                department_id=department.id,
                error=result.message,
            )
            return False

        logger.info(
            "daily_report_email_sent",
            department_id=department.id,
            total=stats.total,
            collections_today=stats.collections_today,
        )
        return True
