"""
Concurrent execution of several portfolios.

Each portfolio is an independent task on a thread pool: it owns its inputs and
returns its full `RollingResults`. Starting a new run cancels the tokens of the
previous one, and a generation counter tells callers whether an outcome still
belongs to the latest request.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any

from .config import SimulationConfig
from .context import ExecutionMode
from .errors import ConfigError, SimulationCancelled
from .results import RollingResults
from .rolling import simulate

__all__ = ["CancelToken", "PortfolioJob", "PortfolioOutcome", "PortfolioRunner"]

logger = logging.getLogger(__name__)


class CancelToken:
    """Thread-safe cancellation flag checked by `simulate` between anchors."""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SimulationCancelled("simulation cancelled by a newer request")


@dataclass(frozen=True, slots=True)
class PortfolioJob:
    """One portfolio to simulate: prices per instrument plus its config."""

    name: str
    prices: Mapping[str, Any]
    config: SimulationConfig
    mode: ExecutionMode = ExecutionMode.FAST


@dataclass(frozen=True, slots=True)
class PortfolioOutcome:
    """
    Result of one portfolio task.

    Exactly one of `results` and `error` is set.
    """

    name: str
    generation: int
    results: RollingResults | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PortfolioRunner:
    """
    Run portfolios concurrently, one task per portfolio.

    **Example:**
        ```python
        from rollsim.core.runner import PortfolioJob, PortfolioRunner

        runner = PortfolioRunner(max_workers=4)
        outcomes = runner.run([
            PortfolioJob("equity", {"nifty": nifty_prices}, equity_config),
            PortfolioJob("balanced", {"nifty": nifty_prices, "gilt": gilt_prices},
                         balanced_config),
        ])
        if runner.is_current(outcomes["equity"].generation):
            show(outcomes["equity"].results)
        ```
    """

    def __init__(self, max_workers: int = 4):
        if max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1 (got {max_workers})")
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._generation = 0
        self._token = CancelToken()

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        """True when `generation` belongs to the most recent `run` call."""
        return generation == self._generation

    def cancel(self) -> None:
        """Cancel the in-flight generation, if any."""
        with self._lock:
            self._token.cancel()

    def _start_generation(self) -> tuple[int, CancelToken]:
        with self._lock:
            self._token.cancel()
            self._generation += 1
            self._token = CancelToken()
            return self._generation, self._token

    def run(self, jobs: Iterable[PortfolioJob]) -> dict[str, PortfolioOutcome]:
        """
        Simulate every job and wait for all of them.

        Starting a run cancels the previous generation still in flight.
        Failures of one portfolio do not affect the others; they are returned
        as `PortfolioOutcome.error`.

        **Returns:**
            name -> outcome, in job order
        """
        jobs = list(jobs)
        names = [job.name for job in jobs]
        if len(set(names)) != len(names):
            raise ConfigError(f"Portfolio names must be unique: {names}")

        generation, token = self._start_generation()
        outcomes: dict[str, PortfolioOutcome] = {}
        if not jobs:
            return outcomes

        with ThreadPoolExecutor(max_workers=self.max_workers) as ex:
            futures = {
                ex.submit(
                    simulate, job.prices, job.config, job.mode, cancel_token=token
                ): job
                for job in jobs
            }
            for fut in as_completed(futures):
                job = futures[fut]
                try:
                    results = fut.result()
                except SimulationCancelled as e:
                    logger.info("Portfolio '%s' cancelled (generation %d)", job.name, generation)
                    outcomes[job.name] = PortfolioOutcome(job.name, generation, error=e)
                except Exception as e:
                    logger.warning("Portfolio '%s' failed: %s", job.name, e)
                    outcomes[job.name] = PortfolioOutcome(job.name, generation, error=e)
                else:
                    outcomes[job.name] = PortfolioOutcome(
                        job.name, generation, results=results
                    )

        return {name: outcomes[name] for name in names}
