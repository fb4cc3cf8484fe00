"""
Rolling driver: one window simulation per anchor date.

Every date of the first (base) instrument's normalized series is tried as an
anchor. Anchors whose window cannot be computed are skipped and counted in the
run metrics; only missing or unusable price data for a whole instrument and
invalid configuration abort the call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import pandas as pd

from .config import SimulationConfig
from .context import ExecutionMode, WindowContext
from .errors import ConfigError, ReturnSolverFailure, WindowSkipped
from .interfaces import IWindowStrategy, get_strategy
from .prices import PriceSeries
from .results import RollingResults, RunMetrics, WindowResult

if TYPE_CHECKING:
    from .runner import CancelToken

__all__ = ["prepare_series", "simulate", "simulate_one"]

logger = logging.getLogger(__name__)


def prepare_series(prices: Mapping[str, Any]) -> tuple[PriceSeries, ...]:
    """
    Normalize every instrument's prices, keeping the mapping order.

    Values may be `PriceSeries`, date-indexed pandas Series, or iterables of
    `PricePoint` / (date, price) pairs.

    Raises:
        ConfigError: no instruments were supplied
        InsufficientDataError: an instrument has fewer than 2 usable prices
    """
    if not prices:
        raise ConfigError("At least one instrument price series is required")

    series = []
    for name, raw in prices.items():
        if isinstance(raw, PriceSeries):
            series.append(raw)
        elif isinstance(raw, pd.Series):
            series.append(PriceSeries.from_series(raw, name=str(name)))
        else:
            series.append(PriceSeries.from_points(str(name), raw))
    return tuple(series)


def _coerce_date(value: date | datetime | str | pd.Timestamp) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return pd.Timestamp(value).date()


def _setup(
    prices: Mapping[str, Any],
    config: SimulationConfig,
    mode: ExecutionMode | str,
    metrics: RunMetrics,
) -> tuple[WindowContext, IWindowStrategy]:
    series = prepare_series(prices)
    strategy = get_strategy(config.mode)
    ctx = WindowContext(
        series=series, config=config, mode=ExecutionMode(mode), metrics=metrics
    )
    strategy.prepare(ctx)
    return ctx, strategy


def _run_window(
    strategy: IWindowStrategy, anchor: date, ctx: WindowContext
) -> WindowResult | None:
    ctx.metrics.anchors_attempted += 1
    try:
        result = strategy.simulate_window(anchor, ctx)
    except ReturnSolverFailure as e:
        ctx.metrics.skipped[e.reason] += 1
        logger.warning("Skipping window ending %s: %s", anchor.isoformat(), e)
        return None
    except WindowSkipped as e:
        ctx.metrics.skipped[e.reason] += 1
        logger.debug("Skipping window ending %s: %s", anchor.isoformat(), e)
        return None
    ctx.metrics.anchors_computed += 1
    return result


def simulate(
    prices: Mapping[str, Any],
    config: SimulationConfig,
    mode: ExecutionMode | str = ExecutionMode.FAST,
    *,
    cancel_token: CancelToken | None = None,
) -> RollingResults:
    """
    Simulate every rolling window of a portfolio.

    **Args:**
        prices: Instrument name -> prices, in allocation order. The first
            instrument's dates are the candidate anchor dates.
        config: Simulation parameters (validated against the portfolio)
        mode: FAST (no `mark` entries) or DETAILED
        cancel_token: Checked before every anchor; firing it aborts the run

    **Returns:**
        RollingResults ordered by anchor date, with run metrics attached

    **Raises:**
        InsufficientDataError: an instrument has fewer than 2 usable prices
        ConfigError: the configuration is invalid for this portfolio
        SimulationCancelled: `cancel_token` fired during the run

    **Example:**
        ```python
        from datetime import date
        from rollsim import SimulationConfig, simulate

        prices = {"fund": [(date(2020, 1, 1), 100.0), (date(2022, 1, 1), 121.0)]}
        results = simulate(prices, SimulationConfig(window_years=1))
        results.to_frame()["internal_rate_of_return"].describe()
        ```
    """
    metrics = RunMetrics()
    ctx, strategy = _setup(prices, config, mode, metrics)

    results: list[WindowResult] = []
    for anchor in ctx.series[0].dates:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        result = _run_window(strategy, anchor, ctx)
        if result is not None:
            results.append(result)

    logger.info(
        "Rolling %s run: %d/%d windows computed (%s)",
        config.mode,
        metrics.anchors_computed,
        metrics.anchors_attempted,
        ", ".join(f"{k}={v}" for k, v in sorted(metrics.skipped.items())) or "no skips",
    )
    return RollingResults(results, config, ctx.mode, metrics)


def simulate_one(
    prices: Mapping[str, Any],
    config: SimulationConfig,
    anchor: date | datetime | str | pd.Timestamp,
) -> WindowResult | None:
    """
    Recompute a single window in detailed mode, `mark` entries included.

    Returns None when the window ending at `anchor` yields no result.
    """
    ctx, strategy = _setup(prices, config, ExecutionMode.DETAILED, RunMetrics())
    return _run_window(strategy, _coerce_date(anchor), ctx)
