"""
Ledger entries produced by the transaction builders.

Each entry kind is its own frozen dataclass carrying only the payload that kind
can have: a `Mark` never moves cash, a `Liquidate` has no target allocation.
All kinds share the instrument, date, price and post-entry holdings.

Sign convention for `cash_amount`: negative = money invested by the investor,
positive = money returned to the investor.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any, ClassVar

import pandas as pd

from .kinds import K

__all__ = [
    "AnnualAdjust",
    "Contribute",
    "LedgerEntry",
    "Liquidate",
    "Mark",
    "Rebalance",
    "entries_to_frame",
]

LEDGER_COLUMNS = [
    "when",
    "instrument",
    "kind",
    "price",
    "units_delta",
    "cash_amount",
    "cumulative_units",
    "current_value",
    "allocation_percent",
]


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    Fields shared by every ledger entry.

    Attributes:
        instrument: Index of the instrument in the portfolio
        when: Calendar date of the entry
        price: Instrument price used for the entry
        cumulative_units: Units held after the entry (units sold, for liquidations)
        current_value: `cumulative_units * price`
    """

    kind: ClassVar[str] = ""

    instrument: int
    when: date
    price: float
    cumulative_units: float
    current_value: float

    @property
    def moves_cash(self) -> bool:
        return self.kind in K.cash_kinds()

    def to_dict(self) -> dict[str, Any]:
        """Flat record of the entry; `when` is an ISO date string."""
        return {
            "when": self.when.isoformat(),
            "instrument": self.instrument,
            "kind": self.kind,
            "price": self.price,
            "units_delta": getattr(self, "units_delta"),
            "cash_amount": getattr(self, "cash_amount"),
            "cumulative_units": self.cumulative_units,
            "current_value": self.current_value,
            "allocation_percent": getattr(self, "allocation_percent"),
        }


@dataclass(frozen=True, slots=True)
class Contribute(LedgerEntry):
    """Periodic purchase; `allocation_percent` is the post-contribution value share."""

    kind: ClassVar[str] = K.TX_CONTRIBUTE

    units_delta: float
    cash_amount: float
    allocation_percent: float


@dataclass(frozen=True, slots=True)
class Rebalance(LedgerEntry):
    """Drift correction toward the target; `allocation_percent` is the target."""

    kind: ClassVar[str] = K.TX_REBALANCE

    units_delta: float
    cash_amount: float
    allocation_percent: float


@dataclass(frozen=True, slots=True)
class AnnualAdjust(LedgerEntry):
    """Glide-path reallocation on a window-start anniversary."""

    kind: ClassVar[str] = K.TX_ANNUAL_ADJUST

    units_delta: float
    cash_amount: float
    allocation_percent: float


@dataclass(frozen=True, slots=True)
class Liquidate(LedgerEntry):
    """Sale of all holdings at the anchor date."""

    kind: ClassVar[str] = K.TX_LIQUIDATE

    units_delta: float
    cash_amount: float

    @property
    def allocation_percent(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Mark(LedgerEntry):
    """Valuation-only record for a day without transactions."""

    kind: ClassVar[str] = K.TX_MARK

    allocation_percent: float

    @property
    def units_delta(self) -> float:
        return 0.0

    @property
    def cash_amount(self) -> float:
        return 0.0


def entries_to_frame(entries: Iterable[LedgerEntry]) -> pd.DataFrame:
    """Tabulate ledger entries, one row per entry, in ledger order."""
    rows = [entry.to_dict() for entry in entries]
    frame = pd.DataFrame(rows, columns=LEDGER_COLUMNS)
    frame["when"] = pd.to_datetime(frame["when"])
    return frame
