"""
Tests for Dashboard Intervals.

Covers: granularity thresholds, max-points cap, calendar arithmetic,
explicit interval overrides, presets.
"""

from datetime import date

import pytest

from opsdash.models.dashboard import DateRange
from opsdash.services.dashboard.intervals import (
    advance,
    date_range_preset,
    default_date_range,
    generate_bucket_dates,
    infer_interval,
    parse_interval,
)


def _range(start: date, end: date) -> DateRange:
    return DateRange(date_from=start, date_to=end)


# ===========================================================================
# TestInferInterval
# ===========================================================================


@pytest.mark.unit
class TestInferInterval:
    """Automatic granularity by span."""

    def test_seven_day_span_is_daily(self) -> None:
        plan = infer_interval(_range(date(2024, 1, 1), date(2024, 1, 8)))
        assert plan.granularity == "day"
        assert plan.points == 7

    def test_thirty_day_span_is_weekly(self) -> None:
        plan = infer_interval(_range(date(2024, 1, 1), date(2024, 1, 31)))
        assert plan.granularity == "week"
        assert plan.interval_days == 7
        assert plan.points == 5

    def test_ninety_day_span_is_monthly(self) -> None:
        plan = infer_interval(_range(date(2024, 1, 31), date(2024, 4, 30)))
        assert plan.granularity == "month"
        assert plan.points == 3

    def test_year_span_is_quarterly(self) -> None:
        plan = infer_interval(_range(date(2024, 1, 1), date(2024, 12, 31)))
        assert plan.granularity == "quarter"
        assert plan.points == 5

    def test_multi_year_span_is_monthly_and_capped(self) -> None:
        plan = infer_interval(_range(date(2022, 1, 1), date(2024, 1, 1)))
        assert plan.granularity == "month"
        assert plan.points == 7

    def test_single_day_has_one_bucket(self) -> None:
        plan = infer_interval(_range(date(2024, 3, 10), date(2024, 3, 10)))
        assert plan.granularity == "day"
        assert plan.points == 1

    def test_max_points_caps_bucket_count(self) -> None:
        plan = infer_interval(_range(date(2024, 1, 1), date(2024, 1, 8)), max_points=3)
        assert plan.points == 3

    def test_daily_bucket_count_matches_span(self) -> None:
        for days in range(1, 8):
            plan = infer_interval(_range(date(2024, 1, 1), date(2024, 1, 1 + days)))
            assert plan.granularity == "day"
            assert plan.points == days

    def test_explicit_interval_overrides_auto(self) -> None:
        plan = infer_interval(
            _range(date(2024, 1, 1), date(2024, 3, 1)), interval="week2"
        )
        assert plan.granularity == "week"
        assert plan.step == 2
        assert plan.interval_days == 14
        assert plan.points == 5

    def test_unknown_interval_falls_back_to_auto(self) -> None:
        plan = infer_interval(
            _range(date(2024, 1, 1), date(2024, 1, 8)), interval="fortnight"
        )
        assert plan.granularity == "day"


# ===========================================================================
# TestParseInterval
# ===========================================================================


@pytest.mark.unit
class TestParseInterval:
    def test_plain_granularity(self) -> None:
        assert parse_interval("quarter") == ("quarter", 1)

    def test_granularity_with_step(self) -> None:
        assert parse_interval("month3") == ("month", 3)

    def test_case_insensitive(self) -> None:
        assert parse_interval(" Week ") == ("week", 1)

    def test_auto_and_empty_are_none(self) -> None:
        assert parse_interval("auto") is None
        assert parse_interval("") is None
        assert parse_interval(None) is None

    def test_zero_step_rejected(self) -> None:
        assert parse_interval("week0") is None


# ===========================================================================
# TestBucketDates
# ===========================================================================


@pytest.mark.unit
class TestBucketDates:
    """Boundary dates use calendar arithmetic."""

    def test_daily_boundaries(self) -> None:
        dates = generate_bucket_dates(_range(date(2024, 1, 1), date(2024, 1, 8)))
        assert dates == [date(2024, 1, d) for d in range(1, 8)]

    def test_weekly_boundaries(self) -> None:
        dates = generate_bucket_dates(_range(date(2024, 1, 1), date(2024, 1, 31)))
        assert dates == [date(2024, 1, d) for d in (1, 8, 15, 22, 29)]

    def test_month_end_start_stays_on_month_ends(self) -> None:
        dates = generate_bucket_dates(_range(date(2024, 1, 31), date(2024, 4, 30)))
        assert dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]

    def test_quarter_boundaries_may_overrun_by_one_step(self) -> None:
        dates = generate_bucket_dates(_range(date(2024, 1, 1), date(2024, 12, 31)))
        assert dates == [
            date(2024, 1, 1),
            date(2024, 4, 1),
            date(2024, 7, 1),
            date(2024, 10, 1),
            date(2025, 1, 1),
        ]

    def test_first_boundary_is_range_start(self) -> None:
        start = date(2023, 6, 17)
        dates = generate_bucket_dates(_range(start, date(2024, 6, 17)))
        assert dates[0] == start

    def test_advance_year(self) -> None:
        assert advance(date(2024, 2, 29), "year") == date(2025, 2, 28)


# ===========================================================================
# TestPresets
# ===========================================================================


@pytest.mark.unit
class TestPresets:
    TODAY = date(2024, 5, 15)

    def test_last_week(self) -> None:
        r = date_range_preset("last-week", self.TODAY)
        assert (r.date_from, r.date_to) == (date(2024, 5, 8), self.TODAY)

    def test_last_month_uses_calendar_month(self) -> None:
        r = date_range_preset("last-month", self.TODAY)
        assert r.date_from == date(2024, 4, 15)

    def test_current_month(self) -> None:
        r = date_range_preset("month", self.TODAY)
        assert (r.date_from, r.date_to) == (date(2024, 5, 1), date(2024, 5, 31))

    def test_current_quarter(self) -> None:
        r = date_range_preset("quarter", self.TODAY)
        assert (r.date_from, r.date_to) == (date(2024, 4, 1), date(2024, 6, 30))

    def test_current_year(self) -> None:
        r = date_range_preset("year", self.TODAY)
        assert (r.date_from, r.date_to) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_unknown_preset_is_last_thirty_days(self) -> None:
        r = date_range_preset("whenever", self.TODAY)
        assert (r.date_from, r.date_to) == (date(2024, 4, 15), self.TODAY)

    def test_default_range_is_last_month(self) -> None:
        r = default_date_range(date(2024, 3, 31))
        assert (r.date_from, r.date_to) == (date(2024, 2, 29), date(2024, 3, 31))
