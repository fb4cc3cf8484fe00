"""
Error classes for RollSim.

This module defines the exception classes used throughout the RollSim engine.
Two families exist:

- **Hard failures** (`ConfigError`, `InsufficientDataError`) abort the whole
  simulation call. No partial results are produced.
- **Window skips** (`WindowSkipped` and its subclasses) only affect a single
  anchor date. The rolling driver catches them, records the reason in the run
  metrics and moves on to the next anchor date.
"""

from __future__ import annotations

from datetime import date


class ConfigError(Exception):
    """
    Configuration error during simulation setup or validation.

    This exception is raised when a `SimulationConfig` is structurally invalid
    or inconsistent with the supplied price data.

    **Common Causes:**
    - Allocations that do not sum to 100 or contain negative weights
    - Allocation length not matching the number of instruments
    - Glide path enabled without an end allocation
    - Rebalancing or step-up requested for an investment mode that does not
      support it (e.g. lumpsum)
    - Non-positive prices in an input series

    **Example Usage:**
        ```python
        from rollsim.core.config import SimulationConfig
        from rollsim.core.errors import ConfigError

        try:
            SimulationConfig(start_allocation=(60, 60)).validate()
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class InsufficientDataError(ValueError):
    """
    Raised when an instrument has fewer than two usable price points.

    Attributes:
        instrument: Name of the offending instrument (if known)
        count: Number of usable points that were supplied
    """

    def __init__(self, instrument: str | None, count: int):
        self.instrument = instrument
        self.count = count
        label = f"'{instrument}'" if instrument else "instrument"
        super().__init__(
            f"{label} has {count} usable price point(s); at least 2 are required"
        )


class SimulationCancelled(Exception):
    """Raised when a cancellation token fires while a rolling run is in flight."""


class WindowSkipped(Exception):
    """
    Base class for conditions that drop a single anchor date.

    Attributes:
        anchor: The anchor (window end) date that could not be computed
        reason: Short machine-readable reason used for metrics
    """

    reason = "skipped"

    def __init__(self, anchor: date, message: str = ""):
        self.anchor = anchor
        super().__init__(message or f"window ending {anchor.isoformat()} skipped")


class WindowNotComputable(WindowSkipped):
    """The window's earliest contribution date precedes the available history."""

    reason = "not_computable"


class MissingPricePointError(WindowSkipped):
    """A price required by the window is absent for one of the instruments."""

    reason = "missing_price"

    def __init__(self, anchor: date, instrument: str, day: date):
        self.instrument = instrument
        self.day = day
        super().__init__(
            anchor, f"no price for '{instrument}' on {day.isoformat()}"
        )


class ReturnSolverFailure(WindowSkipped):
    """The XIRR solver lacks sign-mixed cashflows or failed to converge."""

    reason = "solver_failure"
