"""
Context classes for RollSim window simulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from .prices import PriceSeries

if TYPE_CHECKING:
    from .config import SimulationConfig
    from .results import RunMetrics


class ExecutionMode(str, Enum):
    """
    Ledger verbosity of a simulation run.

    FAST keeps only cash-moving entries. DETAILED also keeps one `mark` entry
    per instrument for every day without a transaction. Both modes compute
    identical returns and volatility.
    """

    FAST = "fast"
    DETAILED = "detailed"

    @property
    def record_marks(self) -> bool:
        return self is ExecutionMode.DETAILED


@dataclass(slots=True)
class WindowContext:
    """
    Read-only inputs shared by every window of one simulation run.

    This dataclass carries what strategies need to compute any window: the
    normalized price series (one per instrument, in allocation order), the
    validated configuration and the execution mode. It also holds the run's
    metrics so strategies can time their phases.

    Attributes:
        series: Normalized price series, one per instrument
        config: Validated simulation configuration
        mode: Execution mode (controls `mark` entries only)
        metrics: Metrics collector of the current run

    Note:
        A context is created per `simulate` call and never shared across
        concurrent runs. Per-window mutable state lives in `SimulationState`.
    """

    series: tuple[PriceSeries, ...]
    config: SimulationConfig
    mode: ExecutionMode
    metrics: RunMetrics

    @property
    def record_marks(self) -> bool:
        return self.mode.record_marks

    @property
    def n_instruments(self) -> int:
        return len(self.series)

    @property
    def first_date(self) -> date:
        """First date of the base instrument (earliest usable contribution date)."""
        return self.series[0].first_date

    @property
    def months(self) -> int:
        return self.config.months

    def prices_on(self, day: date, anchor: date) -> list[float]:
        """
        Price of every instrument on `day`.

        Raises:
            MissingPricePointError: an instrument has no price on `day`
        """
        return [s.price_on(day, anchor) for s in self.series]


@dataclass(slots=True)
class SimulationState:
    """
    Mutable holdings of one window computation.

    Created fresh for every anchor date and discarded once the window's ledger
    is complete.

    Attributes:
        cumulative_units: Units currently held, per instrument
        contributed_units: Units bought by contributions, per instrument
    """

    cumulative_units: list[float] = field(default_factory=list)
    contributed_units: list[float] = field(default_factory=list)

    @classmethod
    def fresh(cls, n_instruments: int) -> SimulationState:
        return cls(
            cumulative_units=[0.0] * n_instruments,
            contributed_units=[0.0] * n_instruments,
        )

    def values(self, prices: list[float]) -> list[float]:
        """Market value of each holding at `prices`."""
        return [u * p for u, p in zip(self.cumulative_units, prices, strict=True)]

    def add_units(self, idx: int, units: float, *, contributed: bool = False) -> float:
        """Apply a unit change and return the new holding."""
        self.cumulative_units[idx] += units
        if contributed:
            self.contributed_units[idx] += units
        return self.cumulative_units[idx]

    def close(self, idx: int) -> float:
        """Zero a holding and return the units it held."""
        units = self.cumulative_units[idx]
        self.cumulative_units[idx] = 0.0
        return units
