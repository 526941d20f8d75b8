"""Daily report and expiry alert feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings

DEFAULT_DAILY_REPORT_TEMPLATE = (
    "📊 Ежедневный отчёт FreshTrack\n{department}\n\nДата: {date}\n\n"
    "✅ В норме: {good}\n⚠️ Скоро истекает: {warning}\n🔴 Просрочено: {expired}\n"
    "📦 Всего партий: {total}\n\n{expiringList}\n\n{expiredList}"
)


class ReportSettings(FeatureSettings):
    """Daily report rendering and expiry warning configuration.

    Environment Variables:
        DAILY_REPORT_TEMPLATE: Template used when a hotel has none configured
        EXPIRY_WARNING_SOON_DAYS: Window counted as "soon" in admin warnings
        REPORT_LIST_LIMIT: Maximum batches listed per section in a report
    """

    daily_report_template: str = Field(
        default=DEFAULT_DAILY_REPORT_TEMPLATE, alias="DAILY_REPORT_TEMPLATE"
    )
    warning_soon_days: int = Field(default=7, alias="EXPIRY_WARNING_SOON_DAYS")
    list_limit: int = Field(default=20, alias="REPORT_LIST_LIMIT")
