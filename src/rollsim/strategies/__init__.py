"""
Strategy implementations for RollSim.

Each investment mode has one strategy that turns an anchor date into a window
ledger and its metrics:

- `StrategySip`: monthly contributions with optional rebalancing, step-up and
  glide path
- `StrategyLumpsum`: one-time investment at the window start

Registry System:
Importing this module registers both strategies and the features their modes
support, making them available to the rolling driver through `config.mode`.
"""

from .lumpsum import StrategyLumpsum
from .registry import register_defaults
from .sip import StrategySip

# Register all default strategies when module is imported
register_defaults()

__all__ = ["StrategyLumpsum", "StrategySip", "register_defaults"]
