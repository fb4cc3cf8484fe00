"""
Price series normalization for RollSim.

Price sources deliver sparse daily series: weekends, holidays and missing
publications leave calendar gaps. The engine walks every calendar day of a
window, so every series is normalized once, up front, into a continuous daily
series where each missing day carries the most recent prior price.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

import numpy as np
import pandas as pd

from .errors import ConfigError, InsufficientDataError, MissingPricePointError

__all__ = ["PricePoint", "PriceSeries", "ensure_continuous"]


@dataclass(frozen=True, slots=True)
class PricePoint:
    """One instrument's value on one calendar day."""

    date: date
    price: float


def _as_series(points: Iterable[Any]) -> pd.Series:
    """Collect PricePoints or (date, price) pairs into a float Series."""
    days: list[pd.Timestamp] = []
    values: list[float] = []
    for point in points:
        if isinstance(point, PricePoint):
            day, value = point.date, point.price
        else:
            day, value = point
        days.append(pd.Timestamp(day).normalize())
        values.append(float(value))
    return pd.Series(values, index=pd.DatetimeIndex(days), dtype=float)


def ensure_continuous(
    points: Iterable[Any] | pd.Series, name: str | None = None
) -> list[PricePoint]:
    """
    Convert a sparse price series into one without calendar gaps.

    **Args:**
        points: PricePoints, (date, price) pairs or a date-indexed pandas Series.
            Order does not matter; for duplicated dates the last value wins.
        name: Instrument name, only used in error messages

    **Returns:**
        PricePoints sorted ascending, exactly one per calendar day between the
        first and last supplied dates. Missing days are forward filled.

    **Raises:**
        InsufficientDataError: fewer than 2 distinct dated prices
        ConfigError: a price is zero or negative

    **Example:**
        ```python
        from datetime import date
        from rollsim.core.prices import PricePoint, ensure_continuous

        filled = ensure_continuous([
            PricePoint(date(2024, 1, 5), 10.0),   # Friday
            PricePoint(date(2024, 1, 8), 11.0),   # Monday
        ])
        # Saturday and Sunday carry Friday's price
        assert [p.price for p in filled] == [10.0, 10.0, 10.0, 11.0]
        ```
    """
    if isinstance(points, pd.Series):
        series = pd.Series(
            points.to_numpy(dtype=float),
            index=pd.DatetimeIndex(points.index).normalize(),
        )
    else:
        series = _as_series(points)

    series = series.dropna()
    series = series[~series.index.duplicated(keep="last")].sort_index()

    if len(series) < 2:
        raise InsufficientDataError(name, len(series))
    if (series <= 0).any():
        bad = series[series <= 0].index[0].date()
        raise ConfigError(
            f"{name or 'instrument'}: prices must be positive (got "
            f"{series[series <= 0].iloc[0]} on {bad.isoformat()})"
        )

    filled = series.asfreq("D", method="ffill")
    return [
        PricePoint(ts.date(), float(value))
        for ts, value in zip(filled.index, filled.to_numpy(), strict=True)
    ]


class PriceSeries:
    """
    Normalized, immutable daily price series with O(1) date lookups.

    Instances are created through `from_points` or `from_series`, which run the
    continuity normalizer, so every calendar day between `first_date` and
    `last_date` has exactly one price.
    """

    __slots__ = ("name", "_points", "_by_date")

    def __init__(self, name: str, points: Sequence[PricePoint]):
        self.name = name
        self._points = tuple(points)
        self._by_date = {p.date: p.price for p in self._points}

    @classmethod
    def from_points(cls, name: str, points: Iterable[Any]) -> PriceSeries:
        return cls(name, ensure_continuous(points, name=name))

    @classmethod
    def from_series(cls, series: pd.Series, name: str | None = None) -> PriceSeries:
        label = name or (str(series.name) if series.name is not None else "series")
        return cls(label, ensure_continuous(series, name=label))

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self._points)

    def __contains__(self, day: object) -> bool:
        return day in self._by_date

    def __repr__(self) -> str:
        return (
            f"PriceSeries(name='{self.name}', {self.first_date} .. "
            f"{self.last_date}, {len(self)} days)"
        )

    @property
    def points(self) -> tuple[PricePoint, ...]:
        return self._points

    @property
    def dates(self) -> list[date]:
        return [p.date for p in self._points]

    @property
    def first_date(self) -> date:
        return self._points[0].date

    @property
    def last_date(self) -> date:
        return self._points[-1].date

    def get(self, day: date) -> float | None:
        """Price on `day`, or None outside the series range."""
        return self._by_date.get(day)

    def price_on(self, day: date, anchor: date | None = None) -> float:
        """
        Price on `day`.

        Raises:
            MissingPricePointError: `day` lies outside the series. `anchor`
                identifies the window being computed (defaults to `day`).
        """
        price = self._by_date.get(day)
        if price is None:
            raise MissingPricePointError(anchor or day, self.name, day)
        return price

    def to_series(self) -> pd.Series:
        """Return the normalized prices as a date-indexed pandas Series."""
        index = pd.DatetimeIndex([p.date for p in self._points])
        values = np.fromiter((p.price for p in self._points), dtype=float)
        return pd.Series(values, index=index, name=self.name)
