"""
Shared fixtures for RollSim tests.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from rollsim.core.prices import PricePoint

FAST_NAVS = [
    100, 120, 144, 172.8, 207.36, 248.83, 298.60,
    358.32, 429.98, 515.98, 619.18, 743.01, 891.61,
]  # fmt: skip
SLOW_NAVS = [
    100, 102, 104.04, 106.12, 108.24, 110.41, 112.61,
    114.87, 117.16, 119.51, 121.90, 124.34, 126.82,
]  # fmt: skip
STABLE_1_NAVS = [100 + i for i in range(13)]
STABLE_2_NAVS = [100 + 1.5 * i for i in range(13)]
MODERATE_NAVS = [100 + 5 * i for i in range(13)]
DECLINING_NAVS = [100 - 5 * i for i in range(13)]


def monthly(values, start: date = date(2023, 1, 1)) -> list[PricePoint]:
    """One price per month on `start`'s day of month."""
    points = []
    for i, value in enumerate(values):
        year, month0 = divmod(start.month - 1 + i, 12)
        points.append(PricePoint(date(start.year + year, month0 + 1, start.day), value))
    return points


def daily_growth(
    rate: float, years: int, start: date = date(2020, 1, 1), start_price: float = 100.0
) -> list[PricePoint]:
    """Daily prices growing at `rate` per 365 days, with 60 spare days."""
    return [
        PricePoint(start + timedelta(days=i), start_price * (1 + rate) ** (i / 365))
        for i in range(years * 365 + 60 + 1)
    ]


@pytest.fixture
def fast_fund():
    return monthly(FAST_NAVS)


@pytest.fixture
def slow_fund():
    return monthly(SLOW_NAVS)


@pytest.fixture
def moderate_fund():
    return monthly(MODERATE_NAVS)


@pytest.fixture
def declining_fund():
    return monthly(DECLINING_NAVS)


@pytest.fixture
def stable_funds():
    return monthly(STABLE_1_NAVS), monthly(STABLE_2_NAVS)


@pytest.fixture
def monthly_points():
    """Factory building monthly PricePoints from a list of prices."""
    return monthly


@pytest.fixture
def daily_points():
    """Factory building daily compounding PricePoints."""
    return daily_growth
