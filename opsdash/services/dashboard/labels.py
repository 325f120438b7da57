"""
Dashboard Labels — Display strings for chart buckets.

Labels are derived from bucket start dates, with precision depending on the
span of the selected range. Formatting is locale-independent so the same
(date, range) pair always produces the same label.
"""

from __future__ import annotations

from datetime import date

from opsdash.models.dashboard import Bucket, DateRange, IntervalPlan
from opsdash.services.dashboard.intervals import (
    DEFAULT_MAX_POINTS,
    bucket_dates,
    infer_interval,
    span_days,
)

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_chart_date(day: date, date_range: DateRange) -> str:
    """Short x-axis label: ``DD/MM`` (<=7d), ``DD`` (<=30d) or month name."""
    total_days = span_days(date_range)
    if total_days <= 7:
        return f"{day.day:02d}/{day.month:02d}"
    if total_days <= 30:
        return f"{day.day:02d}"
    return _MONTH_ABBR[day.month - 1]


def build_buckets(date_range: DateRange, plan: IntervalPlan) -> list[Bucket]:
    return [
        Bucket(index=i, start=start, label=format_chart_date(start, date_range))
        for i, start in enumerate(bucket_dates(date_range, plan))
    ]


def generate_chart_labels(
    date_range: DateRange,
    max_labels: int = DEFAULT_MAX_POINTS,
) -> list[str]:
    """X-axis labels for a range with automatic granularity."""
    plan = infer_interval(date_range, max_labels)
    return [bucket.label for bucket in build_buckets(date_range, plan)]


def format_date(day: date) -> str:
    return f"{day.day:02d}/{day.month:02d}/{day.year}"


def format_date_range(date_from: date, date_to: date) -> str:
    """``DD/MM/YYYY - DD/MM/YYYY``"""
    return f"{format_date(date_from)} - {format_date(date_to)}"
