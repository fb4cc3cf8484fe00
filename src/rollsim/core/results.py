"""
Results and output structures for RollSim.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

import pandas as pd

from .kinds import K
from .ledger import LedgerEntry, entries_to_frame

if TYPE_CHECKING:
    from .config import SimulationConfig
    from .context import ExecutionMode

__all__ = ["RollingResults", "RunMetrics", "WindowResult"]

RESULT_COLUMNS = [
    "internal_rate_of_return",
    "volatility_percent",
    "total_invested",
    "final_value",
]


@dataclass(frozen=True, slots=True)
class WindowResult:
    """
    Outcome of one rolling window.

    Attributes:
        anchor_date: Window end date (liquidation day)
        internal_rate_of_return: Annualized XIRR as a fraction (0.12 = 12%)
        volatility_percent: Annualized volatility of the portfolio value path
        ledger: Entries in emission order (marks only in detailed mode)
        total_invested: Cash contributed over the window
        final_value: Proceeds of the final liquidation
        contributed_units: Units bought by contributions per instrument, excluding
            rebalance and glide-path trades
    """

    anchor_date: date
    internal_rate_of_return: float
    volatility_percent: float | None
    ledger: tuple[LedgerEntry, ...]
    total_invested: float
    final_value: float
    contributed_units: tuple[float, ...] = ()

    def entries(self, kind: str | None = None) -> list[LedgerEntry]:
        """Ledger entries, optionally restricted to one kind."""
        if kind is None:
            return list(self.ledger)
        return [e for e in self.ledger if e.kind == kind]

    @property
    def rebalance_count(self) -> int:
        """Number of dates with at least one rebalance entry."""
        return len({e.when for e in self.ledger if e.kind == K.TX_REBALANCE})

    def ledger_frame(self) -> pd.DataFrame:
        return entries_to_frame(self.ledger)

    def to_dict(self, include_ledger: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "anchor_date": self.anchor_date.isoformat(),
            "internal_rate_of_return": self.internal_rate_of_return,
            "volatility_percent": self.volatility_percent,
            "total_invested": self.total_invested,
            "final_value": self.final_value,
            "contributed_units": list(self.contributed_units),
        }
        if include_ledger:
            data["ledger"] = [e.to_dict() for e in self.ledger]
        return data


@dataclass
class RunMetrics:
    """
    Instrumentation of one simulation run.

    Attributes:
        anchors_attempted: Anchor dates the driver tried
        anchors_computed: Anchor dates that produced a result
        skipped: Skipped anchors per reason (`WindowSkipped.reason`)
        phase_seconds: Wall time spent per phase ("build", "solve", "volatility")
    """

    anchors_attempted: int = 0
    anchors_computed: int = 0
    skipped: Counter[str] = field(default_factory=Counter)
    phase_seconds: dict[str, float] = field(default_factory=dict)

    @property
    def anchors_skipped(self) -> int:
        return sum(self.skipped.values())

    @contextmanager
    def timed(self, phase: str) -> Iterator[None]:
        """Accumulate the wall time of the enclosed block under `phase`."""
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - started
            self.phase_seconds[phase] = self.phase_seconds.get(phase, 0.0) + elapsed

    def to_dict(self) -> dict[str, Any]:
        return {
            "anchors_attempted": self.anchors_attempted,
            "anchors_computed": self.anchors_computed,
            "anchors_skipped": self.anchors_skipped,
            "skipped": dict(self.skipped),
            "phase_seconds": dict(self.phase_seconds),
        }


class RollingResults:
    """
    Window results of one rolling simulation, ordered by anchor date.

    Provides tabular views for analysis and lookups for drill-down.
    """

    def __init__(
        self,
        results: list[WindowResult],
        config: SimulationConfig,
        mode: ExecutionMode,
        metrics: RunMetrics | None = None,
    ):
        self._results = tuple(sorted(results, key=lambda r: r.anchor_date))
        self._by_anchor = {r.anchor_date: r for r in self._results}
        self.config = config
        self.mode = mode
        self.metrics = metrics or RunMetrics()

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[WindowResult]:
        return iter(self._results)

    def __getitem__(self, idx: int) -> WindowResult:
        return self._results[idx]

    def __bool__(self) -> bool:
        return bool(self._results)

    def __repr__(self) -> str:
        return (
            f"RollingResults({len(self)} windows, mode={self.config.mode}, "
            f"execution={self.mode.value})"
        )

    @property
    def results(self) -> tuple[WindowResult, ...]:
        return self._results

    @property
    def anchors(self) -> list[date]:
        return [r.anchor_date for r in self._results]

    def get(self, anchor: date) -> WindowResult | None:
        """Result of the window ending at `anchor`, if it was computed."""
        return self._by_anchor.get(anchor)

    def to_frame(self) -> pd.DataFrame:
        """
        One row per window, indexed by anchor date.

        Columns: internal_rate_of_return, volatility_percent, total_invested,
        final_value.
        """
        index = pd.DatetimeIndex([r.anchor_date for r in self._results], name="anchor_date")
        data = {
            "internal_rate_of_return": [r.internal_rate_of_return for r in self._results],
            "volatility_percent": [r.volatility_percent for r in self._results],
            "total_invested": [r.total_invested for r in self._results],
            "final_value": [r.final_value for r in self._results],
        }
        return pd.DataFrame(data, index=index, columns=RESULT_COLUMNS, dtype=float)

    def ledger_frame(self, anchor: date) -> pd.DataFrame:
        """
        Ledger of one window as a DataFrame.

        Raises:
            KeyError: no window was computed for `anchor`
        """
        result = self.get(anchor)
        if result is None:
            raise KeyError(f"No window result for anchor {anchor.isoformat()}")
        return result.ledger_frame()

    def summary(self) -> dict[str, Any]:
        """Lightweight summary for API/CLI usage."""
        return {
            "windows": len(self),
            "first_anchor": self._results[0].anchor_date.isoformat() if self else None,
            "last_anchor": self._results[-1].anchor_date.isoformat() if self else None,
            "config": self.config.to_dict(),
            "execution_mode": self.mode.value,
            "metrics": self.metrics.to_dict(),
        }

    def to_records(self, include_ledger: bool = False) -> list[dict[str, Any]]:
        return [r.to_dict(include_ledger=include_ledger) for r in self._results]
