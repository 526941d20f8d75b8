"""Daily report rendering.

Templates use ``{placeholder}`` tokens replaced by plain substitution, so
unknown tokens and stray braces in an administrator's template are left
untouched.
"""

import html
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from infrastructure.notifications.channels.email import email_layout
from infrastructure.persistence.models import Batch
from modules.expiry.messages import format_quantity

WEEKDAYS = [
    "понедельник",
    "вторник",
    "среда",
    "четверг",
    "пятница",
    "суббота",
    "воскресенье",
]

MONTHS = [
    "января",
    "февраля",
    "марта",
    "апреля",
    "мая",
    "июня",
    "июля",
    "августа",
    "сентября",
    "октября",
    "ноября",
    "декабря",
]

LIST_UNIT = "шт."


def format_long_date(day: date) -> str:
    """e.g. ``воскресенье, 18 октября 2026 г.``"""
    return f"{WEEKDAYS[day.weekday()]}, {day.day} {MONTHS[day.month - 1]} {day.year} г."


def format_short_date(day: Optional[date]) -> str:
    return day.strftime("%d.%m.%Y") if day else ""


@dataclass
class ReportStats:
    """Aggregated counts and lists for one report unit."""

    total: int = 0
    warning: int = 0
    expired: int = 0
    expiring: List[Batch] = field(default_factory=list)
    expired_batches: List[Batch] = field(default_factory=list)
    collections_today: int = 0

    @property
    def good(self) -> int:
        return max(0, self.total - self.warning - self.expired)


def format_expiring_list(batches: List[Batch], today: date) -> str:
    if not batches:
        return ""
    items = [
        f"  • {b.product_name} — {format_quantity(b.quantity)} {b.unit or LIST_UNIT} "
        f"(истекает {format_short_date(b.expiry_date)}, осталось {b.days_left(today)} дн.)"
        for b in batches
    ]
    return "⚠️ Истекают в ближайшее время:\n" + "\n".join(items)


def format_expired_list(batches: List[Batch], today: date) -> str:
    if not batches:
        return ""
    items = [
        f"  • {b.product_name} — {format_quantity(b.quantity)} {b.unit or LIST_UNIT} "
        f"(просрочено с {format_short_date(b.expiry_date)}, {-b.days_left(today)} дн. назад)"
        for b in batches
    ]
    return "🔴 Просрочено:\n" + "\n".join(items)


def render_template(
    template: str, stats: ReportStats, today: date, department: str = ""
) -> str:
    values = {
        "good": str(stats.good),
        "warning": str(stats.warning),
        "expired": str(stats.expired),
        "total": str(stats.total),
        "date": format_long_date(today),
        "department": department,
        "expiringList": format_expiring_list(stats.expiring, today),
        "expiredList": format_expired_list(stats.expired_batches, today),
    }
    text = template
    for key, value in values.items():
        text = text.replace("{" + key + "}", value)
    return text


def text_to_html(text: str) -> str:
    """Convert report text to HTML: ``**bold**``, ``*italic*`` and line breaks."""
    escaped = html.escape(text, quote=False)
    escaped = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", escaped)
    escaped = re.sub(r"\*(.+?)\*", r"<em>\1</em>", escaped)
    return escaped.replace("\n", "<br>")


def render_report_email(
    report_text: str,
    stats: ReportStats,
    today: date,
    app_url: str,
    hotel_name: Optional[str] = None,
    department_name: Optional[str] = None,
) -> tuple[str, str]:
    """Render (html, text) bodies of a department's daily report email."""
    header = ""
    if hotel_name:
        header += f"<p><strong>Отель:</strong> {html.escape(hotel_name)}</p>"
    if department_name:
        header += f"<p><strong>Отдел:</strong> {html.escape(department_name)}</p>"

    content = (
        '<h2 style="margin-top: 0;">📊 Ежедневный отчёт по инвентарю</h2>'
        f"<p>Отчёт за {format_long_date(today)}</p>"
        f"{header}"
        '<div style="background: #f9fafb; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f"{text_to_html(report_text)}</div>"
        '<table style="margin-top: 20px; width: 100%;"><tr>'
        "<td><strong>Списаний за сутки</strong></td>"
        '<td style="text-align: right; font-size: 24px; font-weight: bold; color: #059669;">'
        f"{stats.collections_today}</td></tr></table>"
        f'<p style="text-align: center;"><a href="{app_url}/inventory">Открыть инвентарь</a></p>'
    )
    text = (
        f"Ежедневный отчёт по инвентарю\n\n{report_text}\n\n"
        f"Списаний за сутки: {stats.collections_today}"
    )
    return email_layout(content, title="Ежедневный отчёт"), text


def report_subject(today: date) -> str:
    return f"FreshTrack: Ежедневный отчёт по инвентарю - {format_short_date(today)}"
