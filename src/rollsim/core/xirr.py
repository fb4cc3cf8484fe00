"""
Cashflow aggregation and XIRR solver.

The rate `r` solves `sum(CF_i / (1 + r) ** (t_i / 365)) = 0`, where `t_i` is
the number of days between the first cashflow and cashflow `i`. Newton-Raphson
(`scipy.optimize.newton`) is tried first; if it diverges, Brent's method
(`scipy.optimize.brentq`) over an expanding bracket takes over.
"""

from __future__ import annotations

import warnings
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date

import numpy as np
from scipy import optimize

from .errors import ReturnSolverFailure
from .ledger import LedgerEntry

__all__ = ["aggregate_cashflows", "xirr", "xirr_from_ledger"]

DAYS_PER_YEAR = 365.0
TOLERANCE = 1e-12
MAX_NEWTON_ITERATIONS = 100
MAX_BRACKET_ITERATIONS = 300
LOWER_BOUND = -0.999999999
UPPER_LIMIT = 1e9
# Newton roots whose NPV exceeds this share of the gross cash are rejected
RESIDUAL_TOLERANCE = 1e-9


def aggregate_cashflows(entries: Iterable[LedgerEntry]) -> list[tuple[date, float]]:
    """
    Net cash per calendar date, ascending.

    `mark` entries never move cash and are ignored.
    """
    by_date: dict[date, float] = defaultdict(float)
    for entry in entries:
        if not entry.moves_cash:
            continue
        by_date[entry.when] += entry.cash_amount
    return sorted(by_date.items())


def _npv(rate: float, amounts: np.ndarray, years: np.ndarray) -> float:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(amounts / np.power(1.0 + rate, years)))


def _npv_derivative(rate: float, amounts: np.ndarray, years: np.ndarray) -> float:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(-years * amounts / np.power(1.0 + rate, years + 1.0)))


def _newton(amounts: np.ndarray, years: np.ndarray, guess: float) -> float | None:
    try:
        with warnings.catch_warnings():
            # zero-derivative and overflow warnings end in the residual check
            warnings.simplefilter("ignore", RuntimeWarning)
            rate = optimize.newton(
                _npv,
                guess,
                fprime=_npv_derivative,
                args=(amounts, years),
                tol=TOLERANCE,
                maxiter=MAX_NEWTON_ITERATIONS,
            )
    except (RuntimeError, OverflowError, ZeroDivisionError):
        return None

    rate = float(rate)
    if not np.isfinite(rate) or rate <= -1.0:
        return None
    residual = _npv(rate, amounts, years)
    if not np.isfinite(residual):
        return None
    if abs(residual) > RESIDUAL_TOLERANCE * float(np.abs(amounts).sum()):
        return None
    return rate


def _brent(amounts: np.ndarray, years: np.ndarray) -> float | None:
    low, high = LOWER_BOUND, 1.0
    f_low = _npv(low, amounts, years)
    f_high = _npv(high, amounts, years)
    while np.isfinite(f_high) and f_low * f_high > 0 and high < UPPER_LIMIT:
        high *= 2.0
        f_high = _npv(high, amounts, years)
    if not (np.isfinite(f_low) and np.isfinite(f_high)) or f_low * f_high > 0:
        return None

    try:
        return float(
            optimize.brentq(
                _npv,
                low,
                high,
                args=(amounts, years),
                xtol=TOLERANCE,
                maxiter=MAX_BRACKET_ITERATIONS,
            )
        )
    except (RuntimeError, ValueError):
        return None


def xirr(
    cashflows: Sequence[tuple[date, float]],
    guess: float = 0.1,
    anchor: date | None = None,
) -> float:
    """
    Annualized internal rate of return of dated cashflows.

    **Args:**
        cashflows: (date, amount) pairs; negative = invested, positive = returned
        guess: Starting rate for Newton-Raphson
        anchor: Window the cashflows belong to, for error reporting
            (defaults to the last cashflow date)

    **Returns:**
        The rate as a fraction (0.12 = 12% per year)

    **Raises:**
        ReturnSolverFailure: fewer than 2 cashflows, cashflows of a single
            sign, or no convergence

    **Example:**
        ```python
        from datetime import date
        from rollsim.core.xirr import xirr

        xirr([(date(2023, 1, 1), -100.0), (date(2024, 1, 1), 110.0)])  # ~0.10
        ```
    """
    flows = sorted(cashflows)
    label = anchor or (flows[-1][0] if flows else date.min)
    if len(flows) < 2:
        raise ReturnSolverFailure(label, f"need at least 2 cashflows, got {len(flows)}")

    start = flows[0][0]
    amounts = np.array([amount for _, amount in flows], dtype=float)
    years = np.array(
        [(day - start).days / DAYS_PER_YEAR for day, _ in flows], dtype=float
    )
    if not (amounts > 0).any() or not (amounts < 0).any():
        raise ReturnSolverFailure(
            label, "cashflows must contain both investments and returns"
        )

    rate = _newton(amounts, years, guess)
    if rate is None:
        rate = _brent(amounts, years)
    if rate is None or not np.isfinite(rate):
        raise ReturnSolverFailure(
            label, f"XIRR did not converge for window ending {label.isoformat()}"
        )
    return rate


def xirr_from_ledger(
    entries: Iterable[LedgerEntry], anchor: date | None = None
) -> float:
    """XIRR of a window ledger (cash aggregated per date, marks ignored)."""
    return xirr(aggregate_cashflows(entries), anchor=anchor)
