"""
Volatility estimation from daily portfolio values.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

import numpy as np

from .kinds import K
from .ledger import LedgerEntry

__all__ = [
    "DailyValue",
    "annualized_volatility",
    "cashflow_adjusted_returns",
    "daily_values_from_ledger",
]


@dataclass(frozen=True, slots=True)
class DailyValue:
    """
    Portfolio valuation at the end of one day.

    Attributes:
        when: Calendar date
        total_value: Sum of all holdings' market values
        cash_flow: Net external cash that day (negative = money put in)
    """

    when: date
    total_value: float
    cash_flow: float = 0.0


def daily_values_from_ledger(entries: Iterable[LedgerEntry]) -> list[DailyValue]:
    """
    Rebuild daily valuations from a detailed ledger.

    Only `mark` and `contribute` entries take part: per date, the total value is
    the sum of their `current_value` and the cash flow the sum of contribution
    `cash_amount`. Days with a non-positive total are dropped.
    """
    totals: dict[date, float] = {}
    flows: dict[date, float] = {}
    for entry in entries:
        if entry.kind not in (K.TX_MARK, K.TX_CONTRIBUTE):
            continue
        totals[entry.when] = totals.get(entry.when, 0.0) + entry.current_value
        flows[entry.when] = flows.get(entry.when, 0.0) + entry.cash_amount
    return [
        DailyValue(day, totals[day], flows[day])
        for day in sorted(totals)
        if totals[day] > 0
    ]


def cashflow_adjusted_returns(values: Sequence[DailyValue]) -> list[float]:
    """
    Daily returns net of external cash: `(V_t - V_{t-1} + CF_t) / V_{t-1}`.

    Days where neither the value changed nor cash moved (forward-filled
    holidays) are skipped.
    """
    returns: list[float] = []
    for previous, current in zip(values, values[1:]):
        change = current.total_value - previous.total_value
        if change == 0 and current.cash_flow == 0:
            continue
        returns.append((change + current.cash_flow) / previous.total_value)
    return returns


def annualized_volatility(values: Sequence[DailyValue]) -> float:
    """
    Annualized volatility of daily portfolio returns, in percent.

    The annualization factor is derived from the data: the number of counted
    returns per elapsed calendar day, scaled to 365 days and rounded to the
    nearest integer. Returns 0.0 when fewer than 2 returns are available.

    **Example:**
        ```python
        from datetime import date
        from rollsim.core.volatility import DailyValue, annualized_volatility

        values = [
            DailyValue(date(2024, 1, 1), 100.0),
            DailyValue(date(2024, 1, 2), 110.0),
            DailyValue(date(2024, 1, 3), 99.0),
        ]
        annualized_volatility(values)  # 0.1 * sqrt(365) * 100
        ```
    """
    usable = [v for v in values if v.total_value > 0]
    returns = cashflow_adjusted_returns(usable)
    if len(returns) < 2:
        return 0.0

    elapsed_days = (usable[-1].when - usable[0].when).days
    if elapsed_days <= 0:
        return 0.0
    trading_days = math.floor(len(returns) / elapsed_days * 365 + 0.5)

    daily = float(np.std(np.asarray(returns, dtype=float), ddof=0))
    volatility = daily * math.sqrt(trading_days) * 100
    return volatility if math.isfinite(volatility) else 0.0
