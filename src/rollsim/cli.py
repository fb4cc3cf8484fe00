"""
Command-line interface for RollSim.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd
import yaml

from rollsim import ExecutionMode, simulate, simulate_one
from rollsim.core.config import SimulationConfig, load_config
from rollsim.core.errors import ConfigError, InsufficientDataError
from rollsim.kpi import rolling_summary
from rollsim.sources import load_price_csv

EXIT_OK = 0
EXIT_NO_RESULTS = 1
EXIT_ERROR = 2


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy scalars, arrays and pandas objects."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, pd.Timestamp | date):
            return obj.isoformat()
        elif isinstance(obj, pd.Series):
            return obj.to_dict()
        return super().default(obj)


def _write_json(data, output: str | None) -> None:
    text = json.dumps(data, indent=2, cls=NumpyEncoder)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")


def _load_prices(paths: list[str]) -> dict[str, pd.Series]:
    """Merge instruments from several CSV files, keeping file order."""
    prices: dict[str, pd.Series] = {}
    for path in paths:
        for name, series in load_price_csv(path).items():
            if name in prices:
                raise ConfigError(f"Instrument '{name}' is defined more than once")
            prices[name] = series
    return prices


def cmd_example(_) -> int:
    """Print an example YAML configuration."""
    example = SimulationConfig(
        window_years=5,
        start_allocation=(60, 40),
        end_allocation=(20, 80),
        rebalance_enabled=True,
        rebalance_threshold=5.0,
        step_up_enabled=True,
        step_up_percent=10.0,
        contribution_amount=1000.0,
        transition_enabled=True,
        transition_years=2,
    ).to_dict()
    sys.stdout.write(yaml.safe_dump(example, sort_keys=False))
    return EXIT_OK


def cmd_run(args) -> int:
    """Run every rolling window and export the results."""
    try:
        config = load_config(args.config)
        prices = _load_prices(args.prices)
        results = simulate(prices, config, ExecutionMode(args.mode))
    except (ConfigError, InsufficientDataError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not results:
        print("No valid data for this period: no window could be computed", file=sys.stderr)
        return EXIT_NO_RESULTS

    if args.summary:
        summary = rolling_summary(results)
        print(summary.to_string(float_format=lambda v: f"{v:.4f}"), file=sys.stderr)

    if args.output and Path(args.output).suffix.lower() == ".csv":
        results.to_frame().to_csv(args.output)
    else:
        payload = {
            "meta": results.summary(),
            "windows": results.to_records(
                include_ledger=results.mode is ExecutionMode.DETAILED
            ),
        }
        _write_json(payload, args.output)

    print(
        f"Computed {len(results)} window(s) "
        f"({results.metrics.anchors_skipped} anchor(s) skipped)",
        file=sys.stderr,
    )
    return EXIT_OK


def cmd_detail(args) -> int:
    """Show the full ledger of one window."""
    try:
        anchor = date.fromisoformat(args.anchor)
    except ValueError:
        print(f"Error: invalid anchor date '{args.anchor}' (expected YYYY-MM-DD)", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = load_config(args.config)
        prices = _load_prices(args.prices)
        result = simulate_one(prices, config, anchor)
    except (ConfigError, InsufficientDataError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if result is None:
        print(f"No result for the window ending {anchor.isoformat()}", file=sys.stderr)
        return EXIT_NO_RESULTS

    if args.json:
        _write_json(result.to_dict(include_ledger=True), None)
    else:
        print(f"Window ending {anchor.isoformat()}")
        print(f"  XIRR:        {result.internal_rate_of_return * 100:.4f}%")
        print(f"  Volatility:  {result.volatility_percent:.4f}%")
        print(f"  Invested:    {result.total_invested:.2f}")
        print(f"  Final value: {result.final_value:.2f}")
        print()
        print(result.ledger_frame().to_string(index=False))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rollsim", description="RollSim - Rolling-window investment simulation"
    )
    parser.add_argument("--version", action="version", version="RollSim 0.1.0")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    example_parser = subparsers.add_parser(
        "example", help="Print an example YAML configuration"
    )
    example_parser.set_defaults(func=cmd_example)

    run_parser = subparsers.add_parser(
        "run", help="Simulate every rolling window and export the results"
    )
    run_parser.add_argument(
        "-c", "--config", required=True, help="Configuration file (YAML or JSON)"
    )
    run_parser.add_argument(
        "-p",
        "--prices",
        required=True,
        nargs="+",
        help="Price CSV file(s); instruments are taken in file order",
    )
    run_parser.add_argument(
        "-o", "--output", help="Output file (.json or .csv; default: JSON to stdout)"
    )
    run_parser.add_argument(
        "--mode",
        choices=[m.value for m in ExecutionMode],
        default=ExecutionMode.FAST.value,
        help="Ledger verbosity (default: fast)",
    )
    run_parser.add_argument(
        "--summary", action="store_true", help="Print return statistics to stderr"
    )
    run_parser.set_defaults(func=cmd_run)

    detail_parser = subparsers.add_parser(
        "detail", help="Show the full ledger of the window ending on one date"
    )
    detail_parser.add_argument(
        "-c", "--config", required=True, help="Configuration file (YAML or JSON)"
    )
    detail_parser.add_argument(
        "-p", "--prices", required=True, nargs="+", help="Price CSV file(s)"
    )
    detail_parser.add_argument(
        "--anchor", required=True, help="Window end date (YYYY-MM-DD)"
    )
    detail_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    detail_parser.set_defaults(func=cmd_detail)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
