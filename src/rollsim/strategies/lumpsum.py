"""
One-time investment (lumpsum) window strategy.
"""

from __future__ import annotations

from datetime import date, timedelta

from rollsim.core.context import SimulationState, WindowContext
from rollsim.core.errors import WindowNotComputable
from rollsim.core.interfaces import IWindowStrategy
from rollsim.core.ledger import LedgerEntry
from rollsim.core.results import WindowResult
from rollsim.core.utils import day_range, nth_previous_month_date
from rollsim.core.volatility import DailyValue

from ._orders import contribute, liquidate, mark_holdings, settle_window


class StrategyLumpsum(IWindowStrategy):
    """
    One-time investment strategy (mode: 'lumpsum').

    The whole `contribution_amount` is invested on the window start date,
    `months` months before the anchor, split by `start_allocation`, and held
    untouched until it is sold on the anchor date.

    Note:
        Rebalancing, step-up and glide paths are not supported by this mode;
        `SimulationConfig.validate` rejects them. With no cash moving mid-window,
        volatility is computed from plain daily returns over the window,
        anchor day included.
    """

    def prepare(self, ctx: WindowContext) -> None:
        """Validate the configuration against the portfolio."""
        ctx.config.validate(ctx.n_instruments)

    def simulate_window(self, anchor: date, ctx: WindowContext) -> WindowResult:
        with ctx.metrics.timed("build"):
            start = nth_previous_month_date(anchor, ctx.months)
            if start < ctx.first_date:
                raise WindowNotComputable(
                    anchor,
                    f"window ending {anchor.isoformat()} starts {start.isoformat()}, "
                    f"history starts {ctx.first_date.isoformat()}",
                )

            cfg = ctx.config
            state = SimulationState.fresh(ctx.n_instruments)
            bought, total = contribute(
                start,
                ctx.prices_on(start, anchor),
                cfg.start_allocation,
                cfg.contribution_amount,
                state,
            )
            ledger: list[LedgerEntry] = list(bought)
            daily_values = [DailyValue(start, total, 0.0)]

            for day in day_range(start + timedelta(days=1), anchor):
                marks, total = mark_holdings(
                    day, ctx.prices_on(day, anchor), state, ctx.record_marks
                )
                ledger.extend(marks)
                daily_values.append(DailyValue(day, total, 0.0))

            final_prices = ctx.prices_on(anchor, anchor)
            daily_values.append(DailyValue(anchor, sum(state.values(final_prices)), 0.0))
            ledger.extend(liquidate(anchor, final_prices, state))

        return settle_window(anchor, ledger, daily_values, state, ctx)
