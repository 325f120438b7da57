"""
Dashboard Intervals — Granularity inference and bucket boundary dates.

The span of the selected range decides the bucketing:
  <=7 days   → day      (1 day steps)
  <=30 days  → week     (7 day steps)
  <=90 days  → month    (calendar months)
  <=365 days → quarter  (calendar quarters)
  longer     → month

The number of buckets is capped by ``max_points`` so charts stay readable.
Month and quarter steps use calendar arithmetic, never fixed day counts.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from opsdash.models.dashboard import DateRange, Granularity, IntervalPlan

logger = logging.getLogger(__name__)

DEFAULT_MAX_POINTS = 7

# (max span in days, granularity, approximate bucket length in days)
_AUTO_THRESHOLDS: tuple[tuple[float, Granularity, int], ...] = (
    (7, "day", 1),
    (30, "week", 7),
    (90, "month", 30),
    (365, "quarter", 90),
    (math.inf, "month", 30),
)

_GRANULARITY_DAYS: dict[str, int] = {
    "day": 1,
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}

_INTERVAL_RE = re.compile(r"^(day|week|month|quarter|year)(\d*)$")


def span_days(date_range: DateRange) -> int:
    """Days between ``from`` and ``to``."""
    return (date_range.date_to - date_range.date_from).days


def parse_interval(interval: str | None) -> tuple[Granularity, int] | None:
    """Parse an explicit interval such as ``"week"`` or ``"month3"``.

    Returns None for ``"auto"``, empty input or anything unrecognized.
    """
    if not interval:
        return None
    value = interval.strip().lower()
    if value == "auto":
        return None

    match = _INTERVAL_RE.match(value)
    if match is None:
        logger.warning("Unknown interval %r, falling back to auto", interval)
        return None

    step = int(match.group(2)) if match.group(2) else 1
    if step < 1:
        logger.warning("Invalid interval step %r, falling back to auto", interval)
        return None
    return match.group(1), step  # type: ignore[return-value]


def infer_interval(
    date_range: DateRange,
    max_points: int = DEFAULT_MAX_POINTS,
    interval: str | None = None,
) -> IntervalPlan:
    """Decide granularity and bucket count for a range."""
    total_days = span_days(date_range)

    override = parse_interval(interval)
    if override is not None:
        granularity, step = override
        interval_days = _GRANULARITY_DAYS[granularity] * step
    else:
        step = 1
        granularity, interval_days = next(
            (g, d) for limit, g, d in _AUTO_THRESHOLDS if total_days <= limit
        )

    points = min(max_points, math.ceil(total_days / interval_days))
    return IntervalPlan(
        granularity=granularity,
        step=step,
        interval_days=interval_days,
        points=max(1, points),
    )


def advance(day: date, granularity: Granularity, step: int = 1) -> date:
    """Move one bucket forward."""
    if granularity == "day":
        return day + timedelta(days=step)
    if granularity == "week":
        return day + timedelta(weeks=step)
    if granularity == "month":
        return day + relativedelta(months=step)
    if granularity == "quarter":
        return day + relativedelta(months=3 * step)
    return day + relativedelta(years=step)


def bucket_dates(date_range: DateRange, plan: IntervalPlan) -> list[date]:
    """Boundary dates for ``plan``, starting at ``from``.

    Offsets are applied to the start date rather than chained, so a month
    bucket starting on the 31st keeps landing on month ends.
    """
    start = date_range.date_from
    return [
        advance(start, plan.granularity, plan.step * i) for i in range(plan.points)
    ]


def generate_bucket_dates(
    date_range: DateRange,
    max_points: int = DEFAULT_MAX_POINTS,
    interval: str | None = None,
) -> list[date]:
    """Evenly spaced bucket boundary dates for a range."""
    return bucket_dates(date_range, infer_interval(date_range, max_points, interval))


# =============================================================================
# PRESETS
# =============================================================================


def default_date_range(today: date) -> DateRange:
    """Last month up to today."""
    return DateRange(date_from=today - relativedelta(months=1), date_to=today)


def date_range_preset(preset: str, today: date) -> DateRange:
    """Named range relative to ``today``. Unknown presets → last 30 days."""
    if preset == "last-day":
        return DateRange(date_from=today - timedelta(days=1), date_to=today)
    if preset == "last-week":
        return DateRange(date_from=today - timedelta(days=7), date_to=today)
    if preset == "last-month":
        return DateRange(date_from=today - relativedelta(months=1), date_to=today)
    if preset == "last-quarter":
        return DateRange(date_from=today - relativedelta(months=3), date_to=today)
    if preset == "last-semester":
        return DateRange(date_from=today - relativedelta(months=6), date_to=today)
    if preset == "last-year":
        return DateRange(date_from=today - relativedelta(years=1), date_to=today)
    if preset == "since-always":
        return DateRange(date_from=today - relativedelta(years=10), date_to=today)
    if preset == "month":
        first = today.replace(day=1)
        return DateRange(
            date_from=first, date_to=first + relativedelta(months=1, days=-1)
        )
    if preset == "quarter":
        first = date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
        return DateRange(
            date_from=first, date_to=first + relativedelta(months=3, days=-1)
        )
    if preset == "year":
        return DateRange(
            date_from=date(today.year, 1, 1), date_to=date(today.year, 12, 31)
        )

    return DateRange(date_from=today - timedelta(days=30), date_to=today)


PRESETS = (
    "last-day",
    "last-week",
    "last-month",
    "last-quarter",
    "last-semester",
    "last-year",
    "since-always",
    "month",
    "quarter",
    "year",
)
