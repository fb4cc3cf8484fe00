"""
Tests for the lumpsum strategy.
"""

from datetime import date

import pytest

from rollsim import ExecutionMode, SimulationConfig, simulate, simulate_one
from rollsim.core.errors import ConfigError
from rollsim.core.kinds import K

ANCHOR = date(2024, 1, 1)


@pytest.fixture
def config():
    return SimulationConfig(mode=K.MODE_LUMPSUM, contribution_amount=1000)


class TestLumpsumWindow:
    """1000 invested once in a fund going from 100 to 160 over the year."""

    def test_ledger(self, moderate_fund, config):
        results = simulate({"fund": moderate_fund}, config)

        assert results.anchors == [ANCHOR]
        (buy,) = results[0].entries(K.TX_CONTRIBUTE)
        (sale,) = results[0].entries(K.TX_LIQUIDATE)
        assert buy.when == date(2023, 1, 1)
        assert buy.units_delta == pytest.approx(10.0)
        assert buy.cash_amount == pytest.approx(-1000.0)
        assert sale.when == ANCHOR
        assert sale.cash_amount == pytest.approx(1600.0)

    def test_return_and_totals(self, moderate_fund, config):
        result = simulate({"fund": moderate_fund}, config)[0]

        assert result.internal_rate_of_return == pytest.approx(0.6, abs=1e-9)
        assert result.total_invested == pytest.approx(1000.0)
        assert result.final_value == pytest.approx(1600.0)

    def test_volatility_is_reported(self, moderate_fund, config):
        result = simulate({"fund": moderate_fund}, config)[0]

        assert result.volatility_percent is not None
        assert result.volatility_percent > 0

    def test_detailed_marks(self, moderate_fund, config):
        result = simulate_one({"fund": moderate_fund}, config, ANCHOR)

        marks = result.entries(K.TX_MARK)
        assert len(marks) == 364
        assert marks[0].when == date(2023, 1, 2)
        assert marks[-1].when == date(2023, 12, 31)
        assert all(m.cumulative_units == pytest.approx(10.0) for m in marks)

    def test_fast_and_detailed_agree(self, moderate_fund, config):
        fast = simulate({"fund": moderate_fund}, config, ExecutionMode.FAST)[0]
        detailed = simulate({"fund": moderate_fund}, config, ExecutionMode.DETAILED)[0]

        assert detailed.internal_rate_of_return == fast.internal_rate_of_return
        assert detailed.volatility_percent == fast.volatility_percent

    def test_split_across_instruments(self, fast_fund, slow_fund):
        config = SimulationConfig(
            mode=K.MODE_LUMPSUM, start_allocation=(60, 40), contribution_amount=1000
        )

        result = simulate({"fast": fast_fund, "slow": slow_fund}, config)[0]

        buys = result.entries(K.TX_CONTRIBUTE)
        assert [-b.cash_amount for b in buys] == pytest.approx([600.0, 400.0])
        assert [b.units_delta for b in buys] == pytest.approx([6.0, 4.0])
        assert result.final_value == pytest.approx(6 * 891.61 + 4 * 126.82)

    def test_rebalancing_rejected(self, moderate_fund):
        config = SimulationConfig(mode=K.MODE_LUMPSUM, rebalance_enabled=True)

        with pytest.raises(ConfigError, match="rebalance"):
            simulate({"fund": moderate_fund}, config)
