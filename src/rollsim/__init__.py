"""
RollSim - Rolling-Window Investment Return Simulation

RollSim replays a disciplined investment plan over every historical window of
a price history. For each window end date (the anchor) it rebuilds the exact
ledger an investor would have produced (contributions, rebalances, glide-path
adjustments and the final liquidation) and derives the window's annualized
return (XIRR) and the annualized volatility of the portfolio value.

Key Features:
- **Two Investment Modes**: Monthly contributions ('sip') or one-time ('lumpsum')
- **Rebalancing**: Threshold-driven, cash-neutral reallocation to target
- **Step-up**: Contribution amount growing every investment year
- **Glide Path**: Stepwise transition from a start to an end allocation
- **Drill-down**: Detailed ledgers with daily valuation marks for one window
- **Concurrent Portfolios**: Thread-pool runner with cancellation

Quick Start:
    ```python
    from datetime import date
    from rollsim import SimulationConfig, simulate
    from rollsim.sources import fixed_return_series

    prices = {
        "equity": fixed_return_series(12, date(2010, 1, 1), date(2020, 1, 1)),
        "bonds": fixed_return_series(6, date(2010, 1, 1), date(2020, 1, 1)),
    }
    config = SimulationConfig(
        window_years=5,
        start_allocation=(60, 40),
        rebalance_enabled=True,
        rebalance_threshold=5,
        contribution_amount=1000,
    )
    results = simulate(prices, config)
    print(results.to_frame().describe())
    ```

Extending the System:
    To add an investment mode:
    1. Implement `IWindowStrategy` (prepare + simulate_window)
    2. Register it in `StrategyRegistry` and its features in `ModeFeatures`
    3. Use the new mode string in `SimulationConfig.mode`
"""

# Version information
__version__ = "0.1.0"
__author__ = "RollSim Team"
__description__ = "Rolling-window investment return simulation"

# Registers the default strategies
import rollsim.strategies

from .core import (
    AnnualAdjust,
    CancelToken,
    ConfigError,
    Contribute,
    ExecutionMode,
    InsufficientDataError,
    K,
    LedgerEntry,
    Liquidate,
    Mark,
    PortfolioJob,
    PortfolioRunner,
    PricePoint,
    PriceSeries,
    Rebalance,
    RollingResults,
    SimulationConfig,
    WindowResult,
    load_config,
    simulate,
    simulate_one,
)

__all__ = [
    "__version__",
    "AnnualAdjust",
    "CancelToken",
    "ConfigError",
    "Contribute",
    "ExecutionMode",
    "InsufficientDataError",
    "K",
    "LedgerEntry",
    "Liquidate",
    "Mark",
    "PortfolioJob",
    "PortfolioRunner",
    "PricePoint",
    "PriceSeries",
    "Rebalance",
    "RollingResults",
    "SimulationConfig",
    "WindowResult",
    "load_config",
    "simulate",
    "simulate_one",
]
