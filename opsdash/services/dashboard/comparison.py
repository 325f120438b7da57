"""
Dashboard Comparison — Prior period resolution.

The comparison period is the block of ``days_diff`` days ending the day
before the current range starts, so the two never overlap.
"""

from __future__ import annotations

from datetime import timedelta
from typing import NamedTuple

from opsdash.models.dashboard import DateRange
from opsdash.services.dashboard.intervals import span_days

_PERIOD_PHRASES = {
    1: "yesterday",
    7: "the previous week",
    30: "the previous month",
    90: "the previous quarter",
    365: "the previous year",
}


class ComparisonPeriod(NamedTuple):
    date_range: DateRange
    text: str


def comparison_days(date_range: DateRange) -> int:
    # A single-day range still compares against the day before.
    return max(1, span_days(date_range))


def comparison_phrase(days_diff: int) -> str:
    """Human-readable name of the prior period."""
    return _PERIOD_PHRASES.get(days_diff, f"the previous {days_diff} days")


def resolve_comparison_period(date_range: DateRange) -> ComparisonPeriod:
    """Prior range ``[from - days_diff, from - 1 day]`` and its phrase."""
    days_diff = comparison_days(date_range)
    prior = DateRange(
        date_from=date_range.date_from - timedelta(days=days_diff),
        date_to=date_range.date_from - timedelta(days=1),
    )
    return ComparisonPeriod(date_range=prior, text=comparison_phrase(days_diff))
