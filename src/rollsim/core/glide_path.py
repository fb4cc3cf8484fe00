"""
Glide-path (allocation transition) helpers for RollSim.

A glide path moves a portfolio from a start allocation to an end allocation
over the last `transition_years` of a rolling window. Progress advances in
whole-year steps, one step per anniversary of the window start.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

__all__ = [
    "is_adjustment_due",
    "is_anniversary",
    "target_allocation",
    "years_elapsed",
]


def years_elapsed(day: date, start: date) -> float:
    """Fractional years between `start` and `day` (365-day year for the day part)."""
    return (
        (day.year - start.year)
        + (day.month - start.month) / 12
        + (day.day - start.day) / 365
    )


def is_anniversary(day: date, start: date) -> bool:
    """True when `day` has the same month and day as `start`."""
    return day.month == start.month and day.day == start.day


def target_allocation(
    day: date,
    start: date,
    window_years: float,
    transition_years: float,
    start_allocation: Sequence[float],
    end_allocation: Sequence[float],
) -> tuple[float, ...]:
    """
    Target allocation (percent per instrument) on `day`.

    **Args:**
        day: Date being evaluated (a contribution date)
        start: First contribution date of the window
        window_years: Rolling window length in years
        transition_years: Length of the transition at the end of the window
        start_allocation: Allocation used before the transition begins
        end_allocation: Allocation reached at the end of the window. Missing
            entries fall back to the matching start entry.

    **Returns:**
        Allocation tuple with one entry per instrument in `start_allocation`

    **Example:**
        ```python
        from datetime import date
        from rollsim.core.glide_path import target_allocation

        # 7-year window, transition over the last 2 years
        target_allocation(
            date(2016, 1, 1), date(2010, 1, 1), 7, 2, (50, 50), (100, 0)
        )  # (75.0, 25.0): one of two transition years completed
        ```
    """
    elapsed = years_elapsed(day, start)
    transition_start = window_years - transition_years

    if elapsed < transition_start:
        return tuple(float(a) for a in start_allocation)

    end = [
        float(end_allocation[i]) if i < len(end_allocation) else float(a)
        for i, a in enumerate(start_allocation)
    ]
    if elapsed >= window_years:
        return tuple(end)

    completed = math.floor(elapsed - transition_start)
    progress = min(max(completed / transition_years, 0.0), 1.0)
    return tuple(
        float(a) + (e - float(a)) * progress for a, e in zip(start_allocation, end)
    )


def is_adjustment_due(
    day: date,
    start: date,
    window_years: float,
    transition_years: float,
    enabled: bool,
) -> bool:
    """
    Whether an annual glide-path adjustment fires on `day`.

    Only exact anniversaries of `start` inside `[transition_start, window_years)`
    qualify, where `transition_start = window_years - transition_years`.
    """
    if not enabled or not is_anniversary(day, start):
        return False
    elapsed = years_elapsed(day, start)
    return window_years - transition_years <= elapsed < window_years
