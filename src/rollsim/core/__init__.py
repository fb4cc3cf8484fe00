"""
Core module for RollSim.

This module contains the building blocks of the rolling-window engine: price
normalization, calendar helpers, glide path, ledger, return and volatility
estimation, and the rolling driver.
"""

from .config import SimulationConfig, load_config
from .context import ExecutionMode, SimulationState, WindowContext
from .errors import (
    ConfigError,
    InsufficientDataError,
    MissingPricePointError,
    ReturnSolverFailure,
    SimulationCancelled,
    WindowNotComputable,
    WindowSkipped,
)
from .interfaces import IWindowStrategy, ModeFeatures, StrategyRegistry, get_strategy
from .kinds import K
from .ledger import (
    AnnualAdjust,
    Contribute,
    LedgerEntry,
    Liquidate,
    Mark,
    Rebalance,
    entries_to_frame,
)
from .prices import PricePoint, PriceSeries, ensure_continuous
from .results import RollingResults, RunMetrics, WindowResult
from .rolling import prepare_series, simulate, simulate_one
from .runner import CancelToken, PortfolioJob, PortfolioOutcome, PortfolioRunner
from .volatility import DailyValue, annualized_volatility, daily_values_from_ledger
from .xirr import aggregate_cashflows, xirr, xirr_from_ledger

__all__ = [
    # Errors
    "ConfigError",
    "InsufficientDataError",
    "MissingPricePointError",
    "ReturnSolverFailure",
    "SimulationCancelled",
    "WindowNotComputable",
    "WindowSkipped",
    # Configuration and context
    "SimulationConfig",
    "load_config",
    "ExecutionMode",
    "SimulationState",
    "WindowContext",
    # Strategy contract
    "IWindowStrategy",
    "ModeFeatures",
    "StrategyRegistry",
    "get_strategy",
    "K",
    # Ledger
    "LedgerEntry",
    "Contribute",
    "Rebalance",
    "AnnualAdjust",
    "Liquidate",
    "Mark",
    "entries_to_frame",
    # Prices
    "PricePoint",
    "PriceSeries",
    "ensure_continuous",
    # Results
    "RollingResults",
    "RunMetrics",
    "WindowResult",
    # Engine
    "prepare_series",
    "simulate",
    "simulate_one",
    "CancelToken",
    "PortfolioJob",
    "PortfolioOutcome",
    "PortfolioRunner",
    # Metrics
    "DailyValue",
    "annualized_volatility",
    "daily_values_from_ledger",
    "aggregate_cashflows",
    "xirr",
    "xirr_from_ledger",
]
