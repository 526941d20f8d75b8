"""Email warnings phase of the daily cycle.

Sends each hotel administrator a summary of expired, expiring-today and
soon-expiring batches for their hotel.
"""

import html
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.email import email_layout
from infrastructure.notifications.models import Role, utcnow
from infrastructure.persistence.models import Hotel, Recipient
from infrastructure.persistence.repositories import Catalog
from infrastructure.persistence.setting_values import is_channel_enabled
from integrations.resend import ResendClient

logger = get_module_logger()


@dataclass(frozen=True)
class ExpiryCounts:
    expired: int = 0
    today: int = 0
    soon: int = 0

    @property
    def any(self) -> bool:
        return bool(self.expired or self.today or self.soon)


def render_warning_email(
    admin: Recipient, hotel: Hotel, counts: ExpiryCounts, day: date, app_url: str
) -> str:
    rows = [
        ("#FEE2E2", "#DC2626", "🔴 Просрочено", counts.expired),
        ("#FEF3C7", "#D97706", "🟡 Истекает сегодня", counts.today),
        ("#FEF9C3", "#CA8A04", "⚠️ Скоро истечёт", counts.soon),
    ]
    table = "".join(
        f'<tr style="background: {bg};">'
        f'<td style="padding: 12px;"><strong style="color: {fg};">{label}</strong></td>'
        f'<td style="padding: 12px; text-align: right;">'
        f'<strong style="font-size: 24px; color: {fg};">{value}</strong></td></tr>'
        for bg, fg, label, value in rows
    )
    content = (
        "<h2>Ежедневный отчёт о сроках годности 📊</h2>"
        f"<p>Привет, <strong>{html.escape(admin.name)}</strong>!</p>"
        f"<p>Отчёт для отеля <strong>{html.escape(hotel.name)}</strong> "
        f"на {day.strftime('%d.%m.%Y')}:</p>"
        f'<table style="width: 100%; border-collapse: collapse; margin: 20px 0;">{table}</table>'
        f'<p style="text-align: center;"><a href="{app_url}/inventory">Открыть инвентарь</a></p>'
    )
    return email_layout(content, title="Отчёт о сроках")


class ExpiryWarningMailer:
    """Per-hotel expiry summary for hotel administrators.

    Attributes:
        catalog: Hotels, users, batches and settings
        client: Email gateway; the phase is skipped when None or disabled
        soon_days: Upper bound of the "soon" window (1..soon_days)
    """

    def __init__(
        self,
        catalog: Catalog,
        client: Optional[ResendClient],
        sender: str,
        app_url: str,
        enabled: bool = True,
        soon_days: int = 7,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.client = client
        self.sender = sender
        self.app_url = app_url.rstrip("/")
        self.enabled = enabled
        self.soon_days = soon_days
        self._clock = clock

    def count_for_hotel(self, hotel_id: str, today: date) -> ExpiryCounts:
        expired = today_count = soon = 0
        for batch in self.catalog.list_active_batches(hotel_id):
            days_left = batch.days_left(today)
            if days_left is None:
                continue
            if days_left < 0:
                expired += 1
            elif days_left == 0:
                today_count += 1
            elif days_left <= self.soon_days:
                soon += 1
        return ExpiryCounts(expired=expired, today=today_count, soon=soon)

    def run(self) -> int:
        """Send the warnings.

        Returns:
            Number of emails sent
        """
        if not self.enabled or self.client is None:
            logger.info("expiry_warnings_skipped", reason="email disabled")
            return 0

        today = self._clock().date()
        sent = 0
        for hotel in self.catalog.list_active_hotels():
            try:
                sent += self._run_for_hotel(hotel, today)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "expiry_warnings_hotel_failed",
                    hotel_id=hotel.id,
                    error=str(e),
                    exc_info=True,
                )

        logger.info("expiry_warnings_completed", emails_sent=sent)
        return sent

    def _run_for_hotel(self, hotel: Hotel, today: date) -> int:
        if not is_channel_enabled(self.catalog, "email", hotel.id):
            logger.debug("expiry_warnings_hotel_disabled", hotel_id=hotel.id)
            return 0

        counts = self.count_for_hotel(hotel.id, today)
        if not counts.any:
            return 0

        admins = [
            u
            for u in self.catalog.list_active_users(hotel.id)
            if u.role == Role.HOTEL_ADMIN and u.has_deliverable_email
        ]

        sent = 0
        for admin in admins:
            result = self.client.send_email(
                to=admin.email,
                subject=(
                    f"📊 Отчёт: {counts.expired} просрочено, "
                    f"{counts.today} истекает сегодня"
                ),
                html=render_warning_email(admin, hotel, counts, today, self.app_url),
                sender=self.sender,
            )
            if result.is_success:
                sent += 1
            else:
                logger.warning(
                    "expiry_warning_email_failed",
                    hotel_id=hotel.id,
                    user_id=admin.id,
                    error=result.message,
                )
        return sent
