"""
KPI calculation utilities for rolling-window analysis.

This module provides standalone functions that summarize rolling results and
window ledgers. All functions return pandas Series or DataFrames.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd

from rollsim.core.kinds import K
from rollsim.core.ledger import LedgerEntry
from rollsim.core.results import RollingResults

SUMMARY_FIELDS = [
    "count",
    "mean",
    "median",
    "min",
    "max",
    "std",
    "p5",
    "p25",
    "p75",
    "p95",
    "negative_share",
    "mean_volatility",
]


def _as_frame(results: RollingResults | pd.DataFrame) -> pd.DataFrame:
    if isinstance(results, RollingResults):
        return results.to_frame()
    return results


def rolling_summary(results: RollingResults | pd.DataFrame) -> pd.Series:
    """
    Distribution statistics of rolling returns.

    Returns are reported in percent. `negative_share` is the fraction of
    windows that lost money; `mean_volatility` the average window volatility.

    Args:
        results: RollingResults, or a frame shaped like `RollingResults.to_frame()`

    Returns:
        Series indexed by `SUMMARY_FIELDS`; statistics are NaN when there are
        no windows
    """
    frame = _as_frame(results)
    returns = frame["internal_rate_of_return"].astype(float) * 100

    if returns.empty:
        values = {name: np.nan for name in SUMMARY_FIELDS}
        values["count"] = 0
        return pd.Series(values, name="rolling_summary")

    quantiles = returns.quantile([0.05, 0.25, 0.75, 0.95])
    values = {
        "count": int(returns.count()),
        "mean": returns.mean(),
        "median": returns.median(),
        "min": returns.min(),
        "max": returns.max(),
        "std": returns.std(ddof=0),
        "p5": quantiles.loc[0.05],
        "p25": quantiles.loc[0.25],
        "p75": quantiles.loc[0.75],
        "p95": quantiles.loc[0.95],
        "negative_share": float((returns < 0).mean()),
        "mean_volatility": frame["volatility_percent"].astype(float).mean(),
    }
    return pd.Series(values, index=SUMMARY_FIELDS, name="rolling_summary")


def return_distribution(
    results: RollingResults | pd.DataFrame, bins: int = 20
) -> pd.DataFrame:
    """
    Histogram of rolling returns (percent).

    Returns:
        DataFrame with `bin_start`, `bin_end` and `count` columns, one row per bin
    """
    frame = _as_frame(results)
    returns = frame["internal_rate_of_return"].dropna().astype(float) * 100
    if returns.empty:
        return pd.DataFrame(columns=["bin_start", "bin_end", "count"])

    counts, edges = np.histogram(returns.to_numpy(), bins=bins)
    return pd.DataFrame(
        {"bin_start": edges[:-1], "bin_end": edges[1:], "count": counts.astype(int)}
    )


def investment_timeline(ledger: Iterable[LedgerEntry]) -> pd.DataFrame:
    """
    Invested capital and portfolio value through one window.

    Contributions add to the invested amount. Reallocation buys add to it and
    reallocation sells reduce it, floored at zero. The value of a date is the
    sum of each instrument's latest `current_value` on that date.

    Returns:
        DataFrame indexed by date with `invested`, `value` and `rebalance`
        (True when a rebalance or glide-path adjustment happened) columns
    """
    invested = 0.0
    invested_by_date: dict = {}
    values_by_date: dict = {}
    reallocated: set = set()

    for entry in sorted(ledger, key=lambda e: e.when):
        if entry.kind == K.TX_CONTRIBUTE:
            invested += abs(entry.cash_amount)
        elif entry.kind in (K.TX_REBALANCE, K.TX_ANNUAL_ADJUST):
            reallocated.add(entry.when)
            if entry.cash_amount < 0:
                invested += -entry.cash_amount
            elif entry.cash_amount > 0:
                invested = max(0.0, invested - entry.cash_amount)

        invested_by_date[entry.when] = invested
        values_by_date.setdefault(entry.when, {})[entry.instrument] = entry.current_value

    days = sorted(values_by_date)
    frame = pd.DataFrame(
        {
            "invested": [invested_by_date[d] for d in days],
            "value": [sum(values_by_date[d].values()) for d in days],
            "rebalance": [d in reallocated for d in days],
        },
        index=pd.DatetimeIndex(days, name="when"),
    )
    return frame
