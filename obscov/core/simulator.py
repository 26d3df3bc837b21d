"""Replicate simulation of bycatch estimation error across coverage levels."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config import CHUNK_CELLS, PROGRESS_INTERVAL
from ..models.request import SamplingDesign, SimulationRequest
from .coverage_grid import CoverageLevel, coverage_levels
from .distributions import CountDistribution
from .validator import DomainError, validate_integer

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

FINITE_POPULATION_COLUMNS = [
    "coverage",
    "observed_units",
    "replicate",
    "observed_total",
    "observed_variance",
    "observed_rate",
    "fpc",
    "standard_error",
    "cv",
]
RESAMPLING_COLUMNS = [
    "coverage",
    "observed_units",
    "replicate",
    "true_rate",
    "observed_rate",
    "error",
]


class SimulationCancelled(RuntimeError):
    """Raised when a running simulation is cancelled; partial results are discarded."""


class _ProgressTracker:
    """Invoke the callback each time another ``interval`` rows complete."""

    def __init__(self, total: int, interval: int, callback: Optional[ProgressCallback]) -> None:
        self.total = total
        self.interval = max(int(interval), 1)
        self.callback = callback
        self._done = 0
        self._next_mark = self.interval
        self._lock = threading.Lock()

    def advance(self, rows: int) -> None:
        with self._lock:
            self._done += rows
            if self._done < self._next_mark:
                return
            self._next_mark = (self._done // self.interval + 1) * self.interval
            LOGGER.debug("Simulated %d/%d replicate rows", self._done, self.total)
            if self.callback is not None:
                self.callback(self._done, self.total)


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SimulationCancelled("Simulation cancelled")


def _finite_population_level(
    level: CoverageLevel,
    request: SimulationRequest,
    distribution: CountDistribution,
    rng: np.random.Generator,
    chunk_cells: int,
    tracker: _ProgressTracker,
    cancel_event: Optional[threading.Event],
) -> pd.DataFrame:
    n = level.observed_units
    reps = request.replicates
    totals = np.empty(reps, dtype=float)
    variances = np.empty(reps, dtype=float)

    chunk_rows = max(1, chunk_cells // n)
    for start in range(0, reps, chunk_rows):
        _check_cancelled(cancel_event)
        stop = min(start + chunk_rows, reps)
        draws = distribution.sample((stop - start, n), rng)
        totals[start:stop] = draws.sum(axis=1)
        variances[start:stop] = draws.var(axis=1, ddof=1)
        tracker.advance(stop - start)

    fpc = 1.0 - n / request.total_effort
    standard_error = np.sqrt(fpc * variances / n)
    observed_rate = totals / n
    # CV is undefined when nothing was observed; keep it as NaN, never zero.
    with np.errstate(divide="ignore", invalid="ignore"):
        cv = np.where(totals > 0, standard_error / observed_rate, np.nan)

    return pd.DataFrame(
        {
            "coverage": np.full(reps, level.proportion),
            "observed_units": np.full(reps, n, dtype=np.int64),
            "replicate": np.arange(1, reps + 1, dtype=np.int64),
            "observed_total": totals,
            "observed_variance": variances,
            "observed_rate": observed_rate,
            "fpc": np.full(reps, fpc),
            "standard_error": standard_error,
            "cv": cv,
        },
        columns=FINITE_POPULATION_COLUMNS,
    )


def _resampling_level(
    level: CoverageLevel,
    request: SimulationRequest,
    distribution: CountDistribution,
    rng: np.random.Generator,
    chunk_cells: int,
    tracker: _ProgressTracker,
    cancel_event: Optional[threading.Event],
) -> pd.DataFrame:
    n = level.observed_units
    te = request.total_effort
    reps = request.replicates
    true_rate = np.empty(reps, dtype=float)
    observed_rate = np.empty(reps, dtype=float)

    chunk_rows = max(1, chunk_cells // te)
    for start in range(0, reps, chunk_rows):
        _check_cancelled(cancel_event)
        stop = min(start + chunk_rows, reps)
        populations = distribution.sample((stop - start, te), rng)
        true_rate[start:stop] = populations.mean(axis=1)
        for offset, population in enumerate(populations):
            observed = population[rng.choice(te, size=n, replace=False)]
            observed_rate[start + offset] = observed.mean()
        tracker.advance(stop - start)

    return pd.DataFrame(
        {
            "coverage": np.full(reps, level.proportion),
            "observed_units": np.full(reps, n, dtype=np.int64),
            "replicate": np.arange(1, reps + 1, dtype=np.int64),
            "true_rate": true_rate,
            "observed_rate": observed_rate,
            "error": observed_rate - true_rate,
        },
        columns=RESAMPLING_COLUMNS,
    )


def simulate_replicates(
    request: SimulationRequest,
    *,
    levels: Optional[Sequence[CoverageLevel]] = None,
    seed_sequence: Optional[np.random.SeedSequence] = None,
    max_workers: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
    progress_interval: int = PROGRESS_INTERVAL,
    cancel_event: Optional[threading.Event] = None,
    chunk_cells: int = CHUNK_CELLS,
) -> pd.DataFrame:
    """Simulate ``request.replicates`` independent replicates per coverage level.

    Each coverage level gets its own child stream spawned from one
    ``SeedSequence``, so a fixed seed gives identical tables regardless of
    ``max_workers``. Rows are ordered by coverage level, then replicate.
    """
    max_workers = validate_integer("max_workers", max_workers, minimum=1)
    chunk_cells = validate_integer("chunk_cells", chunk_cells, minimum=1)
    design = request.design
    if levels is None:
        levels = coverage_levels(request.total_effort, min_units=design.min_units)
    levels = list(levels)
    if not levels:
        raise DomainError(
            f"total_effort={request.total_effort} yields no coverage level with at least "
            f"{design.min_units} observed units"
        )
    too_small = [level for level in levels if level.observed_units < design.min_units]
    if too_small:
        raise DomainError(f"coverage levels need at least {design.min_units} observed units")

    if seed_sequence is None:
        seed_sequence = np.random.SeedSequence(request.seed)
    rngs: List[np.random.Generator] = [np.random.default_rng(child) for child in seed_sequence.spawn(len(levels))]

    distribution = request.distribution()
    tracker = _ProgressTracker(len(levels) * request.replicates, progress_interval, progress_callback)
    simulate_level = (
        _finite_population_level if design is SamplingDesign.FINITE_POPULATION else _resampling_level
    )

    def run_level(level: CoverageLevel, rng: np.random.Generator) -> pd.DataFrame:
        return simulate_level(level, request, distribution, rng, chunk_cells, tracker, cancel_event)

    _check_cancelled(cancel_event)
    if max_workers > 1 and len(levels) > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="obscov-sim") as executor:
            frames = list(executor.map(run_level, levels, rngs))
    else:
        frames = [run_level(level, rng) for level, rng in zip(levels, rngs)]

    return pd.concat(frames, ignore_index=True)


__all__ = [
    "FINITE_POPULATION_COLUMNS",
    "RESAMPLING_COLUMNS",
    "SimulationCancelled",
    "simulate_replicates",
]
