"""
Tests for calendar utilities.
"""

from datetime import date

import pytest

from rollsim.core.errors import ConfigError, WindowNotComputable
from rollsim.core.utils import (
    contribution_schedule,
    day_range,
    investment_year,
    nth_previous_month_date,
    window_months,
)


class TestNthPreviousMonthDate:
    """Backward month arithmetic with end-of-month clamping."""

    @pytest.mark.parametrize(
        "anchor,months,expected",
        [
            (date(2024, 1, 15), 12, date(2023, 1, 15)),
            (date(2024, 3, 31), 1, date(2024, 2, 29)),
            (date(2023, 3, 31), 1, date(2023, 2, 28)),
            (date(2024, 3, 31), 2, date(2024, 1, 31)),
            (date(2024, 1, 1), 1, date(2023, 12, 1)),
            (date(2024, 5, 31), 0, date(2024, 5, 31)),
        ],
    )
    def test_known_dates(self, anchor, months, expected):
        assert nth_previous_month_date(anchor, months) == expected


class TestWindowMonths:
    def test_whole_years(self):
        assert window_months(5) == 60

    def test_fractional_years(self):
        assert window_months(2 / 12) == 2
        assert window_months(0.5) == 6

    def test_shorter_than_a_month_rejected(self):
        with pytest.raises(ConfigError):
            window_months(0.01)


class TestContributionSchedule:
    """Monthly contribution dates of one window."""

    def test_dates_end_one_month_before_anchor(self):
        schedule = contribution_schedule(date(2024, 1, 1), 12, date(2023, 1, 1))

        assert len(schedule) == 12
        assert schedule.earliest == date(2023, 1, 1)
        assert schedule.dates[-1] == date(2023, 12, 1)
        assert date(2024, 1, 1) not in schedule
        assert date(2023, 6, 1) in schedule
        assert date(2023, 6, 2) not in schedule

    def test_month_end_anchor_is_clamped(self):
        schedule = contribution_schedule(date(2024, 3, 31), 3, date(2020, 1, 1))

        assert schedule.dates == (
            date(2023, 12, 31),
            date(2024, 1, 31),
            date(2024, 2, 29),
        )

    def test_window_before_history_is_not_computable(self):
        with pytest.raises(WindowNotComputable) as exc:
            contribution_schedule(date(2023, 12, 31), 12, date(2023, 1, 1))

        assert exc.value.anchor == date(2023, 12, 31)
        assert exc.value.reason == "not_computable"


class TestInvestmentYear:
    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2020, 3, 1), 1),
            (date(2021, 2, 1), 1),
            (date(2021, 3, 1), 2),
            (date(2022, 2, 15), 2),
            (date(2022, 3, 1), 3),
        ],
    )
    def test_years_start_on_first_contribution_month(self, day, expected):
        assert investment_year(day, date(2020, 3, 1)) == expected


def test_day_range_is_half_open():
    days = list(day_range(date(2024, 2, 27), date(2024, 3, 1)))

    assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29)]
    assert list(day_range(date(2024, 1, 1), date(2024, 1, 1))) == []
