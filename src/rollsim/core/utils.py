"""
Calendar utilities for RollSim.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta

from .errors import ConfigError, WindowNotComputable

__all__ = [
    "ContributionSchedule",
    "contribution_schedule",
    "day_range",
    "investment_year",
    "nth_previous_month_date",
    "window_months",
]


def nth_previous_month_date(anchor: date, months: int) -> date:
    """
    Return the date `months` calendar months before `anchor`.

    The day of month is kept; when the target month is shorter, the date is
    clamped to that month's last day. This yields the same dates a forward
    monthly schedule started on the anchor's day-of-month would produce.

    **Example:**
        ```python
        from datetime import date
        from rollsim.core.utils import nth_previous_month_date

        nth_previous_month_date(date(2024, 3, 31), 1)   # date(2024, 2, 29)
        nth_previous_month_date(date(2024, 3, 31), 2)   # date(2024, 1, 31)
        nth_previous_month_date(date(2024, 1, 15), 12)  # date(2023, 1, 15)
        ```
    """
    total = anchor.year * 12 + (anchor.month - 1) - months
    year, month0 = divmod(total, 12)
    last_day = calendar.monthrange(year, month0 + 1)[1]
    return date(year, month0 + 1, min(anchor.day, last_day))


def window_months(window_years: float) -> int:
    """
    Convert a rolling window length in years into whole months.

    Fractional windows are allowed as long as they resolve to at least one
    month (e.g. 2/12 years -> 2 months).
    """
    months = int(round(window_years * 12))
    if months < 1:
        raise ConfigError(
            f"window_years={window_years} resolves to {months} months; need >= 1"
        )
    return months


@dataclass(frozen=True, slots=True)
class ContributionSchedule:
    """
    Contribution dates for one rolling window.

    Attributes:
        anchor: Window end date (liquidation day, never a contribution date)
        dates: Contribution dates in ascending order
    """

    anchor: date
    dates: tuple[date, ...]
    members: frozenset[date] = field(default=frozenset(), repr=False, compare=False)

    @property
    def earliest(self) -> date:
        return self.dates[0]

    def __contains__(self, day: object) -> bool:
        return day in self.members

    def __len__(self) -> int:
        return len(self.dates)


def contribution_schedule(
    anchor: date, months: int, first_date: date
) -> ContributionSchedule:
    """
    Generate the monthly contribution dates for the window ending at `anchor`.

    Dates are counted backward from the anchor, `months` down to 1 month
    before it, keeping the anchor's day of month (clamped for short months).

    **Args:**
        anchor: Window end date
        months: Rolling window length in months
        first_date: Earliest date with available prices

    **Returns:**
        ContributionSchedule with `months` ascending dates

    **Raises:**
        WindowNotComputable: a required date precedes `first_date`
    """
    dates = []
    for m in range(months, 0, -1):
        day = nth_previous_month_date(anchor, m)
        if day < first_date:
            raise WindowNotComputable(
                anchor,
                f"window ending {anchor.isoformat()} needs prices from "
                f"{day.isoformat()}, history starts {first_date.isoformat()}",
            )
        dates.append(day)
    return ContributionSchedule(
        anchor=anchor, dates=tuple(dates), members=frozenset(dates)
    )


def investment_year(day: date, first_contribution: date) -> int:
    """
    Return the 1-based investment year `day` falls into.

    Year 1 starts at the first contribution; a new year starts each time the
    calendar month of the first contribution comes round again.
    """
    years = day.year - first_contribution.year
    if day.month < first_contribution.month:
        years -= 1
    return years + 1


def day_range(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in `[start, end)`."""
    one_day = timedelta(days=1)
    day = start
    while day < end:
        yield day
        day += one_day
