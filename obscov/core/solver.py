"""Minimum observer coverage for a target CV or detection probability."""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd

from ..models.results import TargetResult
from .validator import (
    DomainError,
    validate_detection_target,
    validate_integer,
    validate_percentile,
    validate_target_cv,
)
from .zero_probability import log_probability_zero

LOGGER = logging.getLogger(__name__)

CV_METHODS = ("interpolate", "scan")


def _units_for(coverage: float, total_effort: int) -> int:
    """Observed units needed for ``coverage``, rounded up past float noise."""
    return min(math.ceil(round(coverage * total_effort, 9)), total_effort)


def solve_cv_target(
    summary: pd.DataFrame,
    target_cv: float,
    *,
    total_effort: int,
    column: str = "qcv",
    method: str = "interpolate",
    percentile: Optional[float] = None,
) -> Optional[TargetResult]:
    """Smallest coverage whose summarized CV (``column``) is at or below ``target_cv``.

    ``"scan"`` returns the first grid level meeting the target. ``"interpolate"``
    linearly interpolates between that level and the one before it to estimate
    where the curve crosses the target. Levels without data are skipped.
    Returns ``None`` when no level meets the target.
    """
    target_cv = validate_target_cv(target_cv)
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    if percentile is not None:
        percentile = validate_percentile(percentile)
    if method not in CV_METHODS:
        raise DomainError(f"method must be one of {', '.join(CV_METHODS)} (got {method!r})")
    for required in ("coverage", "observed_units", column):
        if required not in summary.columns:
            raise DomainError(f"summary table is missing column {required!r}")

    valid = summary.dropna(subset=[column]).sort_values("coverage").reset_index(drop=True)
    coverage = valid["coverage"].to_numpy(dtype=float)
    values = valid[column].to_numpy(dtype=float)
    meets = values <= target_cv
    if not meets.any():
        LOGGER.warning("No simulated coverage level reaches CV <= %.3f", target_cv)
        return None

    idx = int(np.argmax(meets))
    if method == "scan" or idx == 0:
        # An exact grid level: report the units that level actually observed.
        min_coverage = float(coverage[idx])
        observed_units = int(valid["observed_units"].iloc[idx])
    else:
        x0, y0 = coverage[idx - 1], values[idx - 1]
        x1, y1 = coverage[idx], values[idx]
        min_coverage = float(x0 + (target_cv - y0) * (x1 - x0) / (y1 - y0))
        observed_units = _units_for(min_coverage, total_effort)

    return TargetResult(
        mode="cv",
        target=target_cv,
        min_coverage=min_coverage,
        observed_units=observed_units,
        total_effort=total_effort,
        method=method,
        percentile=percentile,
    )


def solve_detection_target(
    total_effort: int,
    rate: float,
    dispersion: float,
    target_probability: float,
) -> TargetResult:
    """Coverage giving ``target_probability`` (%) of observing any event when one occurs.

    Solves ``1 - P0(1) ** (x * N) = p / 100 * (1 - P0(N))`` for ``x`` in closed
    form; the observed unit count is rounded up so the target is never missed.
    """
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    target_probability = validate_detection_target(target_probability)
    log_p0 = log_probability_zero(rate, dispersion)

    prob_total = -math.expm1(total_effort * log_p0)
    share = target_probability / 100.0 * prob_total
    if target_probability == 100.0 or share >= 1.0:
        # log P0(N) / (N log P0(1)) is exactly 1; log1p(-1) would raise.
        coverage = 1.0
    else:
        coverage = math.log1p(-share) / (log_p0 * total_effort)
        coverage = min(max(coverage, 0.0), 1.0)
    observed_units = _units_for(coverage, total_effort)

    return TargetResult(
        mode="detection",
        target=target_probability,
        min_coverage=coverage,
        observed_units=observed_units,
        total_effort=total_effort,
        method="analytic",
    )


__all__ = ["CV_METHODS", "solve_cv_target", "solve_detection_target"]
