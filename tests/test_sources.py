"""
Tests for synthetic price sources and CSV loading.
"""

from datetime import date

import pandas as pd
import pytest

from rollsim import SimulationConfig, simulate
from rollsim.core.errors import ConfigError
from rollsim.sources import fixed_return_series, inflation_series, load_price_csv


class TestFixedReturnSeries:
    def test_daily_compounding(self):
        series = fixed_return_series(8, date(2020, 1, 1), date(2021, 1, 1))

        assert len(series) == 367
        assert series.name == "fixed_8pct"
        assert series.iloc[0] == pytest.approx(100.0)
        assert series.iloc[-1] == pytest.approx(100 * 1.08 ** (366 / 365.25))
        assert series.is_monotonic_increasing

    def test_custom_name_and_start_price(self):
        series = fixed_return_series(
            5, date(2020, 1, 1), date(2020, 1, 10), start_price=10, name="bond"
        )

        assert series.name == "bond"
        assert series.iloc[0] == 10.0

    def test_end_before_start(self):
        with pytest.raises(ConfigError):
            fixed_return_series(5, date(2020, 1, 2), date(2020, 1, 1))

    def test_feeds_simulation(self):
        prices = {"fixed": fixed_return_series(10, date(2018, 1, 1), date(2020, 1, 1))}

        results = simulate(prices, SimulationConfig())

        assert len(results) > 300
        assert results.to_frame()["internal_rate_of_return"].mean() == pytest.approx(
            0.10, abs=1e-3
        )


class TestInflationSeries:
    def test_weekdays_only(self):
        series = inflation_series({2023: 5.0}, date(2023, 1, 1), date(2023, 12, 31))

        assert (series.index.dayofweek < 5).all()
        assert series.name == "inflation"

    def test_rates_per_year(self):
        series = inflation_series(
            {2022: 3.65, 2023: 0.0}, date(2022, 12, 28), date(2023, 1, 6)
        )

        first_2023 = series[series.index.year == 2023]
        assert series.iloc[0] == pytest.approx(round(100 * 1.0365 ** (1 / 365.25), 5))
        assert first_2023.nunique() == 1
        assert series.is_monotonic_increasing


class TestLoadPriceCsv:
    """Long, single and wide CSV layouts."""

    def test_long_layout(self, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text(
            "date,instrument,price\n"
            "2024-01-01,equity,100\n"
            "2024-01-01,debt,50\n"
            "2024-01-02,equity,101\n"
            "2024-01-02,debt,50.5\n"
        )

        prices = load_price_csv(path)

        assert list(prices) == ["equity", "debt"]
        assert prices["debt"].tolist() == [50.0, 50.5]
        assert prices["equity"].index[0] == pd.Timestamp("2024-01-01")

    def test_single_layout_named_after_file(self, tmp_path):
        path = tmp_path / "nifty.csv"
        path.write_text("Date,NAV\n2024-01-01,100\n2024-01-02,102\n")

        prices = load_price_csv(path)

        assert list(prices) == ["nifty"]
        assert prices["nifty"].tolist() == [100.0, 102.0]

    def test_wide_layout(self, tmp_path):
        path = tmp_path / "wide.csv"
        path.write_text("date,equity,gold\n2024-01-01,100,\n2024-01-02,101,1800\n")

        prices = load_price_csv(path)

        assert list(prices) == ["equity", "gold"]
        assert len(prices["equity"]) == 2
        assert len(prices["gold"]) == 1

    def test_missing_date_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("day,price\n2024-01-01,100\n")

        with pytest.raises(ConfigError, match="date"):
            load_price_csv(path)
