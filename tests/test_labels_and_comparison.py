"""
Tests for chart labels, variance and the comparison period.
"""

from datetime import date

import pytest

from opsdash.models.dashboard import DateRange
from opsdash.services.dashboard.comparison import (
    comparison_phrase,
    resolve_comparison_period,
)
from opsdash.services.dashboard.labels import (
    format_chart_date,
    format_date_range,
    generate_chart_labels,
)
from opsdash.services.dashboard.variance import calculate_variation, variation_or_none

_WEEK = DateRange(date_from=date(2024, 1, 1), date_to=date(2024, 1, 8))
_MONTH = DateRange(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))
_QUARTER = DateRange(date_from=date(2024, 1, 1), date_to=date(2024, 3, 31))


# ===========================================================================
# TestLabels
# ===========================================================================


@pytest.mark.unit
class TestLabels:
    """Precision follows the span of the selected range."""

    def test_short_span_is_day_and_month(self) -> None:
        assert format_chart_date(date(2024, 1, 5), _WEEK) == "05/01"

    def test_month_span_is_day_only(self) -> None:
        assert format_chart_date(date(2024, 1, 5), _MONTH) == "05"

    def test_long_span_is_month_name(self) -> None:
        assert format_chart_date(date(2024, 2, 5), _QUARTER) == "Feb"

    def test_weekly_scenario_labels(self) -> None:
        labels = generate_chart_labels(_WEEK)
        assert labels == ["01/01", "02/01", "03/01", "04/01", "05/01", "06/01", "07/01"]

    def test_monthly_labels(self) -> None:
        assert generate_chart_labels(_QUARTER) == ["Jan", "Feb", "Mar"]

    def test_labels_are_deterministic(self) -> None:
        assert generate_chart_labels(_MONTH) == generate_chart_labels(_MONTH)

    def test_period_label(self) -> None:
        assert (
            format_date_range(date(2024, 1, 1), date(2024, 1, 31))
            == "01/01/2024 - 31/01/2024"
        )


# ===========================================================================
# TestVariation
# ===========================================================================


@pytest.mark.unit
class TestVariation:
    def test_increase(self) -> None:
        v = calculate_variation(120, 100)
        assert v.percentage == 20.0
        assert v.is_increase is True

    def test_decrease(self) -> None:
        v = calculate_variation(80, 100)
        assert v.percentage == 20.0
        assert v.is_increase is False

    def test_equal_is_never_increase(self) -> None:
        for x in (0, 1, 42.5, 1000):
            assert calculate_variation(x, x).is_increase is False

    def test_zero_to_zero(self) -> None:
        v = calculate_variation(0, 0)
        assert (v.percentage, v.is_increase) == (0.0, False)

    def test_growth_from_zero_is_full_increase(self) -> None:
        v = calculate_variation(5, 0)
        assert (v.percentage, v.is_increase) == (100.0, True)

    def test_drop_to_zero(self) -> None:
        v = calculate_variation(0, 50)
        assert (v.percentage, v.is_increase) == (100.0, False)

    def test_rounded_to_one_decimal(self) -> None:
        assert calculate_variation(1, 3).percentage == 66.7

    def test_halves_round_up(self) -> None:
        # 449 vs 400 is exactly 12.25%
        assert calculate_variation(449, 400).percentage == 12.3
        assert calculate_variation(351, 400).percentage == 12.3

    def test_no_prior_reading(self) -> None:
        assert variation_or_none(5, None) is None
        assert variation_or_none(5, 0) is not None


# ===========================================================================
# TestComparisonPeriod
# ===========================================================================


@pytest.mark.unit
class TestComparisonPeriod:
    def test_weekly_scenario(self) -> None:
        period = resolve_comparison_period(_WEEK)
        assert period.date_range.date_from == date(2023, 12, 25)
        assert period.date_range.date_to == date(2023, 12, 31)
        assert period.text == "the previous week"

    def test_prior_ends_day_before_current_starts(self) -> None:
        for r in (_WEEK, _MONTH, _QUARTER):
            period = resolve_comparison_period(r)
            assert (r.date_from - period.date_range.date_to).days == 1

    def test_single_day_compares_with_yesterday(self) -> None:
        day = DateRange(date_from=date(2024, 3, 10), date_to=date(2024, 3, 10))
        period = resolve_comparison_period(day)
        assert period.date_range.date_from == date(2024, 3, 9)
        assert period.date_range.date_to == date(2024, 3, 9)
        assert period.text == "yesterday"

    def test_month_phrase(self) -> None:
        assert resolve_comparison_period(_MONTH).text == "the previous month"

    def test_other_spans_use_day_count(self) -> None:
        assert comparison_phrase(10) == "the previous 10 days"
