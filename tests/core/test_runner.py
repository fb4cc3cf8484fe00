"""
Tests for the concurrent portfolio runner and cancellation.
"""

import pytest

from rollsim.core.config import SimulationConfig
from rollsim.core.errors import ConfigError, SimulationCancelled
from rollsim.core.rolling import simulate
from rollsim.core.runner import CancelToken, PortfolioJob, PortfolioRunner


class TestCancelToken:
    def test_fresh_token_passes(self):
        token = CancelToken()

        token.raise_if_cancelled()
        assert not token.cancelled

    def test_cancelled_token_raises(self):
        token = CancelToken()
        token.cancel()

        assert token.cancelled
        with pytest.raises(SimulationCancelled):
            token.raise_if_cancelled()

    def test_simulate_honours_token(self, moderate_fund):
        token = CancelToken()
        token.cancel()

        with pytest.raises(SimulationCancelled):
            simulate({"fund": moderate_fund}, SimulationConfig(), cancel_token=token)


class TestPortfolioRunner:
    """One task per portfolio, isolated failures, generations."""

    def test_runs_every_portfolio(self, moderate_fund, fast_fund, slow_fund):
        runner = PortfolioRunner(max_workers=2)
        jobs = [
            PortfolioJob("single", {"moderate": moderate_fund}, SimulationConfig()),
            PortfolioJob(
                "pair",
                {"fast": fast_fund, "slow": slow_fund},
                SimulationConfig(
                    start_allocation=(50, 50),
                    rebalance_enabled=True,
                    rebalance_threshold=5,
                ),
            ),
        ]

        outcomes = runner.run(jobs)

        assert list(outcomes) == ["single", "pair"]
        assert all(o.ok for o in outcomes.values())
        assert len(outcomes["single"].results) == 1
        assert outcomes["pair"].results[0].internal_rate_of_return == pytest.approx(
            2.605716656746517, abs=1e-10
        )
        assert outcomes["single"].generation == runner.generation == 1

    def test_failure_is_isolated(self, moderate_fund):
        runner = PortfolioRunner()
        jobs = [
            PortfolioJob("good", {"fund": moderate_fund}, SimulationConfig()),
            PortfolioJob(
                "bad", {"fund": moderate_fund}, SimulationConfig(start_allocation=(60, 40))
            ),
        ]

        outcomes = runner.run(jobs)

        assert outcomes["good"].ok
        assert not outcomes["bad"].ok
        assert isinstance(outcomes["bad"].error, ConfigError)
        assert outcomes["bad"].results is None

    def test_new_run_supersedes_previous_generation(self, moderate_fund):
        runner = PortfolioRunner()
        job = PortfolioJob("fund", {"fund": moderate_fund}, SimulationConfig())

        first = runner.run([job])["fund"]
        second = runner.run([job])["fund"]

        assert first.generation == 1
        assert second.generation == 2
        assert not runner.is_current(first.generation)
        assert runner.is_current(second.generation)

    def test_starting_a_generation_cancels_the_previous_token(self):
        runner = PortfolioRunner()

        _, old_token = runner._start_generation()
        _, new_token = runner._start_generation()

        assert old_token.cancelled
        assert not new_token.cancelled

    def test_cancel(self):
        runner = PortfolioRunner()
        _, token = runner._start_generation()

        runner.cancel()

        assert token.cancelled

    def test_duplicate_names_rejected(self, moderate_fund):
        job = PortfolioJob("fund", {"fund": moderate_fund}, SimulationConfig())

        with pytest.raises(ConfigError, match="unique"):
            PortfolioRunner().run([job, job])

    def test_invalid_worker_count(self):
        with pytest.raises(ConfigError):
            PortfolioRunner(max_workers=0)

    def test_no_jobs(self):
        runner = PortfolioRunner()

        assert runner.run([]) == {}
        assert runner.generation == 1
