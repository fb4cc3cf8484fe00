"""
Simulation configuration for RollSim.

`SimulationConfig` is supplied by the caller, validated once against the
portfolio it will run on, and read-only for the rest of the run. Configs can be
built directly, from a plain mapping, or from a YAML/JSON file.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .interfaces import ModeFeatures
from .kinds import K
from .utils import window_months

__all__ = ["SimulationConfig", "load_config"]

ALLOCATION_TOLERANCE = 0.01


def _as_allocation(values: Sequence[float] | None) -> tuple[float, ...] | None:
    if values is None:
        return None
    return tuple(float(v) for v in values)


def _check_allocation(name: str, allocation: tuple[float, ...]) -> None:
    if not allocation:
        raise ConfigError(f"{name} must list at least one instrument")
    if any(a < 0 for a in allocation):
        raise ConfigError(f"{name} contains negative weights: {list(allocation)}")
    total = sum(allocation)
    if abs(total - 100.0) > ALLOCATION_TOLERANCE:
        raise ConfigError(f"{name} must sum to 100 (got {total:.4f})")


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    """
    Parameters of one rolling-window simulation.

    Attributes:
        window_years: Rolling window length in years (fractions allowed, >= 1 month)
        start_allocation: Target allocation in percent, one entry per instrument
        end_allocation: Glide-path end allocation (required when transitioning)
        rebalance_enabled: Rebalance to target after contributions when drifting
        rebalance_threshold: Drift in percentage points that triggers a rebalance
        step_up_enabled: Grow the contribution amount every investment year
        step_up_percent: Annual step-up in percent (10 -> +10% per year)
        contribution_amount: Monthly amount (sip) or one-time amount (lumpsum)
        transition_enabled: Move from start to end allocation over the window end
        transition_years: Length of the transition in years
        mode: Investment mode, one of `K.all_modes()`
    """

    window_years: float = 1
    start_allocation: tuple[float, ...] = (100.0,)
    end_allocation: tuple[float, ...] | None = None
    rebalance_enabled: bool = False
    rebalance_threshold: float = 5.0
    step_up_enabled: bool = False
    step_up_percent: float = 0.0
    contribution_amount: float = 100.0
    transition_enabled: bool = False
    transition_years: float = 0
    mode: str = K.MODE_SIP

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "start_allocation", _as_allocation(self.start_allocation)
        )
        object.__setattr__(self, "end_allocation", _as_allocation(self.end_allocation))

    @property
    def months(self) -> int:
        """Window length in whole months."""
        return window_months(self.window_years)

    @property
    def requested_features(self) -> set[str]:
        requested = set()
        if self.rebalance_enabled:
            requested.add(K.FEATURE_REBALANCE)
        if self.step_up_enabled:
            requested.add(K.FEATURE_STEP_UP)
        if self.transition_enabled:
            requested.add(K.FEATURE_TRANSITION)
        return requested

    def validate(self, n_instruments: int | None = None) -> SimulationConfig:
        """
        Check the configuration, optionally against the instrument count.

        **Returns:**
            self, so calls can be chained

        **Raises:**
            ConfigError: on the first problem found
        """
        supported = ModeFeatures.get(self.mode)
        if supported is None:
            raise ConfigError(
                f"Unknown mode '{self.mode}'. Available: {sorted(ModeFeatures)}"
            )

        window_months(self.window_years)

        _check_allocation("start_allocation", self.start_allocation)
        if n_instruments is not None and len(self.start_allocation) != n_instruments:
            raise ConfigError(
                f"start_allocation has {len(self.start_allocation)} entries "
                f"for {n_instruments} instrument(s)"
            )
        if self.end_allocation is not None:
            if len(self.end_allocation) != len(self.start_allocation):
                raise ConfigError(
                    "end_allocation must have as many entries as start_allocation"
                )
            _check_allocation("end_allocation", self.end_allocation)

        if not 0 <= self.rebalance_threshold <= 100:
            raise ConfigError(
                f"rebalance_threshold must be within [0, 100] "
                f"(got {self.rebalance_threshold})"
            )
        if self.contribution_amount <= 0:
            raise ConfigError(
                f"contribution_amount must be positive (got {self.contribution_amount})"
            )
        if self.step_up_percent < 0:
            raise ConfigError(
                f"step_up_percent cannot be negative (got {self.step_up_percent})"
            )

        if self.transition_enabled:
            if self.end_allocation is None:
                raise ConfigError("transition_enabled requires end_allocation")
            if not 0 < self.transition_years <= self.window_years:
                raise ConfigError(
                    f"transition_years must be within (0, window_years="
                    f"{self.window_years}] (got {self.transition_years})"
                )

        unsupported = self.requested_features - supported
        if unsupported:
            raise ConfigError(
                f"Mode '{self.mode}' does not support: {', '.join(sorted(unsupported))}"
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["start_allocation"] = list(self.start_allocation)
        if self.end_allocation is not None:
            data["end_allocation"] = list(self.end_allocation)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from snake_case keys; unknown keys are rejected."""
        if not isinstance(data, Mapping):
            raise ConfigError("Configuration root must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**dict(data))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


def load_config(path: str | Path) -> SimulationConfig:
    """
    Load a `SimulationConfig` from a `.yaml`, `.yml` or `.json` file.

    **Example:**
        ```yaml
        window_years: 5
        start_allocation: [60, 40]
        rebalance_enabled: true
        rebalance_threshold: 5
        contribution_amount: 1000
        ```
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = path.suffix.lstrip(".").lower()
    text = path.read_text(encoding="utf-8")
    if fmt in {"yaml", "yml"}:
        data = yaml.safe_load(text)
    elif fmt == "json":
        data = json.loads(text)
    else:
        raise ConfigError(f"Unsupported config format '{fmt}' for {path}")

    if data is None:
        data = {}
    return SimulationConfig.from_dict(data)
