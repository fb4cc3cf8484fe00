"""
Price sources for RollSim.

Synthetic series (fixed return, inflation index) and CSV loading. All sources
return date-indexed pandas Series that `simulate` accepts directly. Nothing
here reaches the network; inflation rates are supplied by the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd

from rollsim.core.errors import ConfigError

__all__ = ["fixed_return_series", "inflation_series", "load_price_csv"]

DAYS_PER_YEAR = 365.25
PRICE_COLUMNS = ("price", "nav", "close", "value")


def fixed_return_series(
    annual_return_percent: float,
    start: date,
    end: date,
    start_price: float = 100.0,
    name: str | None = None,
) -> pd.Series:
    """
    Daily prices compounding at a fixed annual return.

    Every calendar day from `start` to `end` (inclusive) grows by
    `(1 + r) ** (1 / 365.25)`.

    **Example:**
        ```python
        from datetime import date
        from rollsim.sources import fixed_return_series

        s = fixed_return_series(8, date(2020, 1, 1), date(2021, 1, 1))
        s.iloc[0]   # 100.0
        ```
    """
    if end < start:
        raise ConfigError(f"end {end} precedes start {start}")
    index = pd.date_range(start, end, freq="D")
    factor = (1 + annual_return_percent / 100) ** (1 / DAYS_PER_YEAR)
    values = start_price * np.power(factor, np.arange(len(index), dtype=float))
    label = name or f"fixed_{annual_return_percent:g}pct"
    return pd.Series(values, index=index, name=label)


def inflation_series(
    yearly_rates: Mapping[int, float],
    start: date,
    end: date,
    start_price: float = 100.0,
    name: str = "inflation",
) -> pd.Series:
    """
    Weekday index compounding yearly inflation rates.

    Each weekday multiplies the index by `(1 + rate / 100) ** (1 / 365.25)`
    using the rate of its calendar year; years without a rate grow at 0%.
    Published values are rounded to 5 decimals.

    **Args:**
        yearly_rates: Calendar year -> inflation rate in percent
        start: First date of the index
        end: Last date of the index (inclusive)
        start_price: Index level before the first weekday
        name: Series name
    """
    if end < start:
        raise ConfigError(f"end {end} precedes start {start}")
    index = pd.bdate_range(start, end)
    rates = np.array([yearly_rates.get(ts.year, 0.0) for ts in index], dtype=float)
    growth = np.power(1 + rates / 100, 1 / DAYS_PER_YEAR)
    values = np.round(start_price * np.cumprod(growth), 5)
    return pd.Series(values, index=index, name=name)


def _price_column(columns: list[str], path: Path) -> str:
    for candidate in PRICE_COLUMNS:
        if candidate in columns:
            return candidate
    raise ConfigError(
        f"{path}: no price column found (expected one of {', '.join(PRICE_COLUMNS)})"
    )


def load_price_csv(path: str | Path) -> dict[str, pd.Series]:
    """
    Load one or more instruments' prices from a CSV file.

    Supported layouts (column names are case-insensitive):

    - long: `date,instrument,price` (one row per instrument and date)
    - single: `date,price` (instrument named after the file)
    - wide: `date,<instrument>,<instrument>...`

    `nav`, `close` and `value` are accepted in place of `price`.

    **Returns:**
        Instrument name -> date-indexed price Series, in file order
    """
    path = Path(path)
    frame = pd.read_csv(path)
    frame.columns = [str(c).strip() for c in frame.columns]
    lowered = {c.lower(): c for c in frame.columns}
    if "date" not in lowered:
        raise ConfigError(f"{path}: a 'date' column is required")

    dates = pd.to_datetime(frame[lowered["date"]])
    instruments: dict[str, pd.Series] = {}

    if "instrument" in lowered:
        price_col = lowered[_price_column(list(lowered), path)]
        names = frame[lowered["instrument"]].astype(str)
        for name in names.unique():
            mask = names == name
            series = pd.Series(
                frame.loc[mask, price_col].to_numpy(dtype=float),
                index=pd.DatetimeIndex(dates[mask]),
                name=name,
            )
            instruments[name] = series.dropna()
    elif any(c in lowered for c in PRICE_COLUMNS):
        price_col = lowered[_price_column(list(lowered), path)]
        instruments[path.stem] = pd.Series(
            frame[price_col].to_numpy(dtype=float),
            index=pd.DatetimeIndex(dates),
            name=path.stem,
        ).dropna()
    else:
        for column in frame.columns:
            if column == lowered["date"]:
                continue
            instruments[column] = pd.Series(
                pd.to_numeric(frame[column], errors="coerce").to_numpy(dtype=float),
                index=pd.DatetimeIndex(dates),
                name=column,
            ).dropna()

    if not instruments:
        raise ConfigError(f"{path}: no instrument columns found")
    return instruments
