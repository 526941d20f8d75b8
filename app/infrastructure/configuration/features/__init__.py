"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.reports import (
    DEFAULT_DAILY_REPORT_TEMPLATE,
    ReportSettings,
)

__all__ = ["DEFAULT_DAILY_REPORT_TEMPLATE", "ReportSettings"]
