"""High-level orchestration for observer coverage projections."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional

import numpy as np
import pandas as pd

from .config import (
    CHUNK_CELLS,
    DEFAULT_DISPERSION,
    DEFAULT_PERCENTILE,
    DEFAULT_REPLICATES,
    DEFAULT_TARGET_CV,
    DEFAULT_TARGET_DETECTION,
    MAX_WORKERS,
    PROGRESS_INTERVAL,
    RANDOM_SEED,
)
from .core.coverage_grid import coverage_levels
from .core.diagnostics import ValidationResult, sample_size_table, validate_simulation
from .core.simulator import simulate_replicates
from .core.solver import solve_cv_target, solve_detection_target
from .core.summarizer import summarize, summarize_rmse
from .core.validator import validate_integer, validate_percentile
from .core.zero_probability import (
    detection_curve,
    detection_probability,
    probability_zero,
    upper_confidence_limit,
)
from .models.request import SamplingDesign, SimulationRequest
from .models.results import SimulationResults, TargetResult

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class CoverageEngine:
    """Primary entry point for simulating and solving observer coverage targets."""

    def __init__(
        self,
        *,
        max_workers: int = MAX_WORKERS,
        progress_interval: int = PROGRESS_INTERVAL,
        chunk_cells: int = CHUNK_CELLS,
    ) -> None:
        self.max_workers = validate_integer("max_workers", max_workers, minimum=1)
        self.progress_interval = validate_integer("progress_interval", progress_interval, minimum=1)
        self.chunk_cells = validate_integer("chunk_cells", chunk_cells, minimum=1)

    # ---------------------------------------------------------------- Simulation
    def simulate(
        self,
        request: SimulationRequest,
        *,
        percentile: float = DEFAULT_PERCENTILE,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SimulationResults:
        """Simulate CVs for every coverage level and summarize them."""
        percentile = validate_percentile(percentile)
        levels = coverage_levels(request.total_effort, min_units=request.design.min_units)
        seed_sequence = np.random.SeedSequence(request.seed if request.seed is not None else RANDOM_SEED)
        total_rows = len(levels) * request.replicates

        def emit_progress(rows_done: int, rows_total: int) -> None:
            if progress_callback is None:
                return
            try:
                progress_callback(rows_done, rows_total, f"Simulated {rows_done}/{rows_total} replicates")
            except Exception as exc:
                LOGGER.warning("Progress callback failed: %s", exc)

        LOGGER.info(
            "Simulating %s design: total_effort=%d rate=%g dispersion=%g replicates=%d (%d levels)",
            request.design.value,
            request.total_effort,
            request.rate,
            request.dispersion,
            request.replicates,
            len(levels),
        )
        started = time.perf_counter()
        replicates = simulate_replicates(
            request,
            levels=levels,
            seed_sequence=seed_sequence,
            max_workers=self.max_workers,
            progress_callback=emit_progress,
            progress_interval=self.progress_interval,
            cancel_event=cancel_event,
            chunk_cells=self.chunk_cells,
        )
        summary = self._summarize(replicates, request, percentile)
        elapsed = time.perf_counter() - started
        LOGGER.info("Simulated %d replicate rows in %.2fs", total_rows, elapsed)

        insufficient = int((summary["replicates"] == 0).sum())
        if insufficient:
            LOGGER.warning("%d coverage level(s) had no replicate with positive observed bycatch", insufficient)

        return SimulationResults(
            request=request,
            replicates=replicates,
            summary=summary,
            percentile=percentile,
            metadata={
                "seed_entropy": seed_sequence.entropy,
                "coverage_levels": len(levels),
                "rows": total_rows,
                "elapsed_seconds": elapsed,
                "completed_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    @staticmethod
    def _summarize(replicates: pd.DataFrame, request: SimulationRequest, percentile: float) -> pd.DataFrame:
        if request.design is SamplingDesign.FINITE_POPULATION:
            return summarize(replicates, percentile / 100.0)
        return summarize_rmse(replicates, request.rate)

    def summarize(self, results: SimulationResults, percentile: float = DEFAULT_PERCENTILE) -> pd.DataFrame:
        """Re-summarize a result bundle at another percentile."""
        percentile = validate_percentile(percentile)
        return self._summarize(results.replicates, results.request, percentile)

    # -------------------------------------------------------------------- Targets
    def minimum_coverage_for_cv(
        self,
        results: SimulationResults,
        target_cv: float = DEFAULT_TARGET_CV,
        *,
        percentile: Optional[float] = None,
        method: str = "interpolate",
    ) -> Optional[TargetResult]:
        """Minimum coverage achieving ``target_cv`` with ``percentile``% probability."""
        if results.design is SamplingDesign.RESAMPLING:
            return solve_cv_target(
                results.summary,
                target_cv,
                total_effort=results.total_effort,
                column="cv",
                method=method,
            )
        percentile = results.percentile if percentile is None else validate_percentile(percentile)
        summary = results.summary if percentile == results.percentile else self.summarize(results, percentile)
        return solve_cv_target(
            summary,
            target_cv,
            total_effort=results.total_effort,
            column="qcv",
            method=method,
            percentile=percentile,
        )

    def minimum_coverage_for_detection(
        self,
        total_effort: int,
        rate: float,
        dispersion: float = DEFAULT_DISPERSION,
        target_probability: float = DEFAULT_TARGET_DETECTION,
    ) -> TargetResult:
        """Minimum coverage to observe bycatch with the target probability when it occurs."""
        return solve_detection_target(total_effort, rate, dispersion, target_probability)

    # ---------------------------------------------------------------- Diagnostics
    def sample_size(self, results: SimulationResults) -> pd.DataFrame:
        return sample_size_table(results)

    def validate(self, results: SimulationResults) -> ValidationResult:
        return validate_simulation(results)

    # ------------------------------------------------------------------ Analytics
    @staticmethod
    def detection_curve(total_effort: int, rate: float, dispersion: float = DEFAULT_DISPERSION) -> pd.DataFrame:
        return detection_curve(total_effort, rate, dispersion)

    @staticmethod
    def detection_probability(coverage, total_effort: int, rate: float, dispersion: float = DEFAULT_DISPERSION):
        return detection_probability(coverage, total_effort, rate, dispersion)

    @staticmethod
    def probability_zero(n, rate: float, dispersion: float = DEFAULT_DISPERSION):
        return probability_zero(n, rate, dispersion)

    @staticmethod
    def upper_confidence_limit(n, dispersion: float = DEFAULT_DISPERSION, confidence: float = 0.95):
        return upper_confidence_limit(n, dispersion, confidence)


def simulate_cv_coverage(
    total_effort: int,
    rate: float,
    dispersion: float = DEFAULT_DISPERSION,
    replicates: int = DEFAULT_REPLICATES,
    *,
    design: SamplingDesign = SamplingDesign.FINITE_POPULATION,
    seed: Optional[int] = None,
    percentile: float = DEFAULT_PERCENTILE,
    max_workers: int = MAX_WORKERS,
    progress_callback: Optional[ProgressCallback] = None,
) -> SimulationResults:
    """Convenience wrapper: build a request and simulate it with a default engine."""
    request = SimulationRequest(
        total_effort=total_effort,
        rate=rate,
        dispersion=dispersion,
        replicates=replicates,
        design=design,
        seed=seed,
    )
    engine = CoverageEngine(max_workers=max_workers)
    return engine.simulate(request, percentile=percentile, progress_callback=progress_callback)


__all__ = ["CoverageEngine", "simulate_cv_coverage"]
