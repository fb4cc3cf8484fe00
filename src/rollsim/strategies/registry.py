"""
Strategy registry setup for RollSim.
"""

from rollsim.core.interfaces import ModeFeatures, StrategyRegistry
from rollsim.core.kinds import K

from .lumpsum import StrategyLumpsum
from .sip import StrategySip


def register_defaults():
    """
    Register the default strategy of every investment mode.

    Registered Strategies:
        - 'sip': Monthly contributions (rebalancing, step-up, glide path)
        - 'lumpsum': One-time investment held to the anchor date

    Note:
        This function is automatically called when `rollsim.strategies` is
        imported. Additional modes can be registered by filling
        `StrategyRegistry` and `ModeFeatures` directly.
    """
    StrategyRegistry[K.MODE_SIP] = StrategySip()
    ModeFeatures[K.MODE_SIP] = frozenset(
        {K.FEATURE_REBALANCE, K.FEATURE_STEP_UP, K.FEATURE_TRANSITION}
    )

    StrategyRegistry[K.MODE_LUMPSUM] = StrategyLumpsum()
    ModeFeatures[K.MODE_LUMPSUM] = frozenset()
