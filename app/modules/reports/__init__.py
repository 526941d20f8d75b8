"""Daily inventory reports over chat and email."""

from modules.reports.aggregator import DailyReportAggregator, aggregate
from modules.reports.templates import ReportStats, render_template, text_to_html

__all__ = [
    "DailyReportAggregator",
    "ReportStats",
    "aggregate",
    "render_template",
    "text_to_html",
]
