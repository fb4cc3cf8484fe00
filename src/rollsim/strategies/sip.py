"""
Periodic contribution (SIP) window strategy.
"""

from __future__ import annotations

from datetime import date

from rollsim.core.config import SimulationConfig
from rollsim.core.context import SimulationState, WindowContext
from rollsim.core.glide_path import is_adjustment_due, target_allocation
from rollsim.core.interfaces import IWindowStrategy
from rollsim.core.ledger import AnnualAdjust, LedgerEntry, Rebalance
from rollsim.core.results import WindowResult
from rollsim.core.utils import (
    ContributionSchedule,
    contribution_schedule,
    day_range,
    investment_year,
)
from rollsim.core.volatility import DailyValue

from ._orders import (
    MATERIALITY,
    contribute,
    drift_exceeds,
    liquidate,
    mark_holdings,
    reallocate,
    settle_window,
)


class StrategySip(IWindowStrategy):
    """
    Monthly contribution strategy (mode: 'sip').

    For a window ending on an anchor date, the investor contributes once a
    month on the anchor's day of month, starting `months` months before the
    anchor, and sells everything on the anchor date.

    Key Features:
        - Static target allocation, or a glide path over the last
          `transition_years` of the window
        - Threshold rebalancing after contributions
        - Annual contribution step-up
        - Optional per-day `mark` entries (detailed execution mode)

    Contribution Day Processing Order:
        1. Target allocation (static or glide path)
        2. Annual glide-path adjustment, on window-start anniversaries
        3. Contribution split by target allocation
        4. Threshold rebalance, unless an adjustment was due that day

    Note:
        Every day of the window records the portfolio value and the external
        cash flow of that day, in both execution modes. Volatility is computed
        from these values, so it does not depend on the ledger verbosity.
    """

    def prepare(self, ctx: WindowContext) -> None:
        """Validate the configuration against the portfolio."""
        ctx.config.validate(ctx.n_instruments)

    def simulate_window(self, anchor: date, ctx: WindowContext) -> WindowResult:
        """
        Build the ledger of the window ending at `anchor`.

        Raises:
            WindowNotComputable: the first contribution precedes the history
            MissingPricePointError: a required price is absent
            ReturnSolverFailure: the window's XIRR cannot be solved
        """
        with ctx.metrics.timed("build"):
            schedule = contribution_schedule(anchor, ctx.months, ctx.first_date)
            state = SimulationState.fresh(ctx.n_instruments)
            ledger: list[LedgerEntry] = []
            daily_values: list[DailyValue] = []

            for day in day_range(schedule.earliest, anchor):
                entries, value = self._step(
                    day, anchor, schedule, ctx, state, ctx.record_marks
                )
                ledger.extend(entries)
                daily_values.append(value)

            ledger.extend(liquidate(anchor, ctx.prices_on(anchor, anchor), state))

        return settle_window(anchor, ledger, daily_values, state, ctx)

    def _step(
        self,
        day: date,
        anchor: date,
        schedule: ContributionSchedule,
        ctx: WindowContext,
        state: SimulationState,
        record_marks: bool,
    ) -> tuple[list[LedgerEntry], DailyValue]:
        prices = ctx.prices_on(day, anchor)
        if day not in schedule:
            marks, total = mark_holdings(day, prices, state, record_marks)
            return list(marks), DailyValue(day, total, 0.0)

        cfg = ctx.config
        first = schedule.earliest
        target = self._target(day, first, cfg)
        entries: list[LedgerEntry] = []

        adjustment_due = is_adjustment_due(
            day, first, cfg.window_years, cfg.transition_years, cfg.transition_enabled
        )
        if adjustment_due:
            before = sum(state.values(prices))
            if before >= MATERIALITY:
                entries.extend(
                    reallocate(AnnualAdjust, day, prices, target, before, state)
                )

        bought, total = contribute(
            day, prices, target, self._amount(day, first, cfg), state
        )
        entries.extend(bought)

        # one allocation correction per day at most
        if (
            cfg.rebalance_enabled
            and not adjustment_due
            and drift_exceeds(state, prices, target, cfg.rebalance_threshold, total)
        ):
            entries.extend(reallocate(Rebalance, day, prices, target, total, state))

        cash_flow = sum(e.cash_amount for e in bought)
        return entries, DailyValue(day, total, cash_flow)

    @staticmethod
    def _target(day: date, first: date, cfg: SimulationConfig) -> tuple[float, ...]:
        if not cfg.transition_enabled or cfg.end_allocation is None:
            return cfg.start_allocation
        return target_allocation(
            day,
            first,
            cfg.window_years,
            cfg.transition_years,
            cfg.start_allocation,
            cfg.end_allocation,
        )

    @staticmethod
    def _amount(day: date, first: date, cfg: SimulationConfig) -> float:
        """Contribution for `day`: base amount grown by the step-up per investment year."""
        if not cfg.step_up_enabled:
            return cfg.contribution_amount
        growth = 1 + cfg.step_up_percent / 100
        return cfg.contribution_amount * growth ** (investment_year(day, first) - 1)
