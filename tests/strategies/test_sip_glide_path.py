"""
Tests for glide-path transitions in the SIP strategy.
"""

from datetime import date

import pytest

from rollsim import SimulationConfig, simulate_one
from rollsim.core.kinds import K

ANCHOR = date(2020, 1, 1)


@pytest.fixture
def twin_funds(monthly_points):
    """Two identical funds growing 1% a month from 2010 to 2020."""
    navs = [100 * 1.01**i for i in range(121)]
    start = date(2010, 1, 1)
    return {"equity": monthly_points(navs, start), "debt": monthly_points(navs, start)}


@pytest.fixture
def glide_config():
    return SimulationConfig(
        window_years=7,
        start_allocation=(50, 50),
        end_allocation=(100, 0),
        transition_enabled=True,
        transition_years=2,
    )


class TestGlidePathWindow:
    """Window 2013-01-01 .. 2020-01-01 with a transition over its last 2 years."""

    def test_single_adjustment_date(self, twin_funds, glide_config):
        result = simulate_one(twin_funds, glide_config, ANCHOR)

        adjustments = result.entries(K.TX_ANNUAL_ADJUST)
        assert {e.when for e in adjustments} == {date(2019, 1, 1)}
        assert len(adjustments) == 2

    def test_adjustment_is_cash_neutral(self, twin_funds, glide_config):
        result = simulate_one(twin_funds, glide_config, ANCHOR)

        adjustments = result.entries(K.TX_ANNUAL_ADJUST)
        assert sum(e.cash_amount for e in adjustments) == pytest.approx(0.0, abs=1e-10)
        assert [e.allocation_percent for e in adjustments] == [75.0, 25.0]
        assert adjustments[0].units_delta > 0
        assert adjustments[1].units_delta < 0

    def test_adjustment_precedes_contribution(self, twin_funds, glide_config):
        result = simulate_one(twin_funds, glide_config, ANCHOR)

        kinds = [e.kind for e in result.ledger if e.when == date(2019, 1, 1)]
        assert kinds == [
            K.TX_ANNUAL_ADJUST,
            K.TX_ANNUAL_ADJUST,
            K.TX_CONTRIBUTE,
            K.TX_CONTRIBUTE,
        ]

    def test_contributions_follow_target(self, twin_funds, glide_config):
        result = simulate_one(twin_funds, glide_config, ANCHOR)

        def split(day):
            return [-e.cash_amount for e in result.entries(K.TX_CONTRIBUTE) if e.when == day]

        assert split(date(2013, 1, 1)) == pytest.approx([50.0, 50.0])
        assert split(date(2018, 6, 1)) == pytest.approx([50.0, 50.0])
        assert split(date(2019, 6, 1)) == pytest.approx([75.0, 25.0])

    def test_no_adjustment_when_disabled(self, twin_funds):
        config = SimulationConfig(window_years=7, start_allocation=(50, 50))

        result = simulate_one(twin_funds, config, ANCHOR)

        assert result.entries(K.TX_ANNUAL_ADJUST) == []

    def test_adjustment_day_skips_rebalance(self, twin_funds):
        config = SimulationConfig(
            window_years=7,
            start_allocation=(50, 50),
            end_allocation=(100, 0),
            transition_enabled=True,
            transition_years=2,
            rebalance_enabled=True,
            rebalance_threshold=0,
        )

        result = simulate_one(twin_funds, config, ANCHOR)

        assert date(2019, 1, 1) not in {e.when for e in result.entries(K.TX_REBALANCE)}
        assert len(result.entries(K.TX_ANNUAL_ADJUST)) == 2
