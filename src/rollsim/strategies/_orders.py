"""
Order helpers shared by the window strategies.

Every helper mutates the window's `SimulationState` and returns the ledger
entries it produced. Values are summed in instrument order everywhere so that
totals are bit-identical whichever helper computed them.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from rollsim.core.context import SimulationState, WindowContext
from rollsim.core.kinds import K
from rollsim.core.ledger import (
    AnnualAdjust,
    Contribute,
    LedgerEntry,
    Liquidate,
    Mark,
    Rebalance,
)
from rollsim.core.results import WindowResult
from rollsim.core.volatility import DailyValue, annualized_volatility
from rollsim.core.xirr import xirr_from_ledger

# Reallocations smaller than this (in currency units) are not executed
MATERIALITY = 0.01


def _share(value: float, total: float) -> float:
    return value / total * 100 if total > 0 else 0.0


def contribute(
    day: date,
    prices: Sequence[float],
    weights: Sequence[float],
    amount: float,
    state: SimulationState,
) -> tuple[list[Contribute], float]:
    """
    Invest `amount` split by `weights` (percent).

    One entry is emitted per instrument, including zero-weight ones.

    Returns:
        (entries, post-contribution portfolio value)
    """
    investments = [amount * w / 100 for w in weights]
    bought = [inv / p for inv, p in zip(investments, prices, strict=True)]
    for idx, units in enumerate(bought):
        state.add_units(idx, units, contributed=True)

    values = state.values(list(prices))
    total = sum(values)
    entries = [
        Contribute(
            instrument=idx,
            when=day,
            price=prices[idx],
            cumulative_units=state.cumulative_units[idx],
            current_value=values[idx],
            units_delta=bought[idx],
            cash_amount=-investments[idx],
            allocation_percent=_share(values[idx], total),
        )
        for idx in range(len(prices))
    ]
    return entries, total


def drift_exceeds(
    state: SimulationState,
    prices: Sequence[float],
    target: Sequence[float],
    threshold: float,
    total: float,
) -> bool:
    """True when any instrument's share is more than `threshold` points off target."""
    if total <= 0:
        return False
    values = state.values(list(prices))
    return any(
        abs(_share(value, total) - goal) > threshold
        for value, goal in zip(values, target, strict=True)
    )


def reallocate(
    entry_type: type[Rebalance] | type[AnnualAdjust],
    day: date,
    prices: Sequence[float],
    target: Sequence[float],
    total: float,
    state: SimulationState,
) -> list[LedgerEntry]:
    """
    Move every holding to `target` percent of `total`.

    Instruments whose adjustment is within `MATERIALITY` are left untouched.
    Buys carry negative cash, sells positive; they net to zero across the date.
    """
    entries: list[LedgerEntry] = []
    for idx, (price, goal) in enumerate(zip(prices, target, strict=True)):
        current = state.cumulative_units[idx] * price
        delta = total * (goal / 100) - current
        if abs(delta) <= MATERIALITY:
            continue
        units = delta / price
        held = state.add_units(idx, units)
        entries.append(
            entry_type(
                instrument=idx,
                when=day,
                price=price,
                cumulative_units=held,
                current_value=held * price,
                units_delta=units,
                cash_amount=-delta,
                allocation_percent=float(goal),
            )
        )
    return entries


def mark_holdings(
    day: date,
    prices: Sequence[float],
    state: SimulationState,
    record: bool,
) -> tuple[list[Mark], float]:
    """
    Value the holdings on a day without transactions.

    Returns:
        (mark entries, or [] when `record` is False; portfolio value)
    """
    values = state.values(list(prices))
    total = sum(values)
    if not record:
        return [], total
    entries = [
        Mark(
            instrument=idx,
            when=day,
            price=prices[idx],
            cumulative_units=state.cumulative_units[idx],
            current_value=values[idx],
            allocation_percent=_share(values[idx], total),
        )
        for idx in range(len(prices))
    ]
    return entries, total


def liquidate(
    day: date, prices: Sequence[float], state: SimulationState
) -> list[Liquidate]:
    """Sell every holding at `prices`; the state ends empty."""
    entries = []
    for idx, price in enumerate(prices):
        units = state.close(idx)
        proceeds = units * price
        entries.append(
            Liquidate(
                instrument=idx,
                when=day,
                price=price,
                cumulative_units=units,
                current_value=proceeds,
                units_delta=-units,
                cash_amount=proceeds,
            )
        )
    return entries


def settle_window(
    anchor: date,
    ledger: list[LedgerEntry],
    daily_values: list[DailyValue],
    state: SimulationState,
    ctx: WindowContext,
) -> WindowResult:
    """
    Derive XIRR and volatility of a finished window ledger.

    Raises:
        ReturnSolverFailure: the window's cashflows have no solvable rate
    """
    with ctx.metrics.timed("solve"):
        rate = xirr_from_ledger(ledger, anchor=anchor)
    with ctx.metrics.timed("volatility"):
        volatility = annualized_volatility(daily_values)

    invested = -sum(e.cash_amount for e in ledger if e.kind == K.TX_CONTRIBUTE)
    final_value = sum(e.cash_amount for e in ledger if e.kind == K.TX_LIQUIDATE)
    return WindowResult(
        anchor_date=anchor,
        internal_rate_of_return=rate,
        volatility_percent=volatility,
        ledger=tuple(ledger),
        total_invested=invested,
        final_value=final_value,
        contributed_units=tuple(state.contributed_units),
    )
