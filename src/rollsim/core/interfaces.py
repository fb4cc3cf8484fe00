"""
Strategy interface protocols for RollSim.
Defines the contract every investment-mode strategy must satisfy, plus the
registries that map a mode to its strategy and to the features it supports.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import ConfigError

if TYPE_CHECKING:
    # Only imported for type checking to avoid runtime cycles
    from .context import WindowContext
    from .results import WindowResult


@runtime_checkable
class IWindowStrategy(Protocol):
    """
    Contract for investment-mode strategies.
    Responsibilities: turn one anchor date into a ledger and its metrics.
    """

    def prepare(self, ctx: WindowContext) -> None:
        """
        Validate the run inputs for this mode.
        Called exactly once per simulation run, before the first window.
        Must not keep per-run state on the strategy instance.
        """
        ...

    def simulate_window(self, anchor: date, ctx: WindowContext) -> WindowResult:
        """
        Compute the window ending at `anchor`.

        Returns:
            WindowResult with the ledger, XIRR and volatility of the window

        Raises:
            WindowSkipped: (or a subclass) when this anchor yields no result
        """
        ...


# mode -> strategy instance (populated by rollsim.strategies.register_defaults)
StrategyRegistry: dict[str, IWindowStrategy] = {}

# mode -> optional features (K.FEATURE_*) the mode supports
ModeFeatures: dict[str, frozenset[str]] = {}


def get_strategy(mode: str) -> IWindowStrategy:
    """Look up the strategy registered for `mode`."""
    try:
        return StrategyRegistry[mode]
    except KeyError:
        raise ConfigError(
            f"No strategy registered for mode '{mode}'. "
            f"Available: {sorted(StrategyRegistry)}"
        ) from None


__all__ = ["IWindowStrategy", "ModeFeatures", "StrategyRegistry", "get_strategy"]
