"""
Edge cases of the SIP strategy: sparse data, invalid portfolios, short history.
"""

from datetime import date

import pandas as pd
import pytest

from rollsim import SimulationConfig, simulate, simulate_one
from rollsim.core.errors import ConfigError, InsufficientDataError
from rollsim.core.kinds import K
from rollsim.core.prices import PricePoint


class TestInvalidInput:
    def test_single_price_point(self):
        with pytest.raises(InsufficientDataError):
            simulate({"fund": [PricePoint(date(2023, 1, 1), 100.0)]}, SimulationConfig())

    def test_one_short_instrument_aborts(self, moderate_fund):
        prices = {"fund": moderate_fund, "other": [PricePoint(date(2023, 1, 1), 50.0)]}

        with pytest.raises(InsufficientDataError) as exc:
            simulate(prices, SimulationConfig(start_allocation=(50, 50)))

        assert exc.value.instrument == "other"

    def test_no_instruments(self):
        with pytest.raises(ConfigError):
            simulate({}, SimulationConfig())

    def test_allocation_mismatch(self, moderate_fund):
        with pytest.raises(ConfigError):
            simulate({"fund": moderate_fund}, SimulationConfig(start_allocation=(60, 40)))

    def test_unknown_mode(self, moderate_fund):
        with pytest.raises(ConfigError, match="mode"):
            simulate({"fund": moderate_fund}, SimulationConfig(mode="weekly"))


class TestShortHistory:
    def test_window_longer_than_history(self, moderate_fund):
        results = simulate({"fund": moderate_fund}, SimulationConfig(window_years=2))

        assert len(results) == 0
        assert not results
        assert results.metrics.anchors_attempted == 366
        assert results.metrics.skipped["not_computable"] == 366

    def test_simulate_one_outside_history(self, moderate_fund):
        assert simulate_one({"fund": moderate_fund}, SimulationConfig(), "2023-06-01") is None


class TestInputShapes:
    """Equivalent inputs give identical windows."""

    def test_input_order_is_irrelevant(self, moderate_fund):
        config = SimulationConfig()

        forward = simulate({"fund": moderate_fund}, config)[0]
        backward = simulate({"fund": list(reversed(moderate_fund))}, config)[0]

        assert backward.internal_rate_of_return == forward.internal_rate_of_return
        assert backward.ledger == forward.ledger

    def test_pandas_series_input(self, moderate_fund):
        series = pd.Series(
            [p.price for p in moderate_fund],
            index=pd.to_datetime([p.date for p in moderate_fund]),
        )
        config = SimulationConfig()

        from_points = simulate({"fund": moderate_fund}, config)[0]
        from_series = simulate({"fund": series}, config)[0]

        assert from_series.internal_rate_of_return == from_points.internal_rate_of_return

    def test_weekend_contribution_uses_friday_price(self):
        # 2023-09-30 and 2023-10-01 fall on a weekend
        prices = {
            "fund": [
                PricePoint(date(2023, 9, 1), 100.0),
                PricePoint(date(2023, 9, 29), 110.0),
                PricePoint(date(2023, 10, 2), 120.0),
                PricePoint(date(2023, 11, 1), 130.0),
            ]
        }
        config = SimulationConfig(window_years=2 / 12)

        result = simulate_one(prices, config, date(2023, 11, 1))
        contributions = result.entries(K.TX_CONTRIBUTE)

        assert [c.when for c in contributions] == [date(2023, 9, 1), date(2023, 10, 1)]
        assert contributions[1].price == 110.0

    def test_month_end_anchor_clamps_contribution_days(self, daily_points):
        prices = {"fund": daily_points(0.08, 2)}
        config = SimulationConfig(window_years=0.5)

        result = simulate_one(prices, config, date(2021, 8, 31))
        days = [c.when for c in result.entries(K.TX_CONTRIBUTE)]

        assert days == [
            date(2021, 2, 28),
            date(2021, 3, 31),
            date(2021, 4, 30),
            date(2021, 5, 31),
            date(2021, 6, 30),
            date(2021, 7, 31),
        ]

    def test_zero_weight_instrument_still_recorded(self, fast_fund, slow_fund):
        config = SimulationConfig(start_allocation=(100, 0))

        result = simulate({"fast": fast_fund, "slow": slow_fund}, config)[0]
        idle = [c for c in result.entries(K.TX_CONTRIBUTE) if c.instrument == 1]

        assert len(idle) == 12
        assert all(c.units_delta == 0.0 and c.cash_amount == 0.0 for c in idle)
        assert all(c.allocation_percent == 0.0 for c in idle)
