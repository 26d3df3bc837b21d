"""Diagnostics for simulated CV projections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
import pandas as pd

from ..models.request import SamplingDesign
from ..models.results import SimulationResults
from .validator import DomainError
from .zero_probability import probability_zero

# Fraction of replicates below which a level's CV quantiles are flagged as noisy
LOW_SAMPLE_FRACTION = 0.10


@dataclass
class ValidationResult:
    """Basic container for validation outcomes."""

    status: str
    failed_checks: Sequence[str]
    warnings: Sequence[str]

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "failed_checks": list(self.failed_checks),
            "warnings": list(self.warnings),
        }


def _require_finite_population(results: SimulationResults) -> None:
    if results.design is not SamplingDesign.FINITE_POPULATION:
        raise DomainError("diagnostics require the finite-population design")


def sample_size_table(results: SimulationResults) -> pd.DataFrame:
    """Replicates with positive observed bycatch per coverage level.

    Alongside the simulated count, report the analytic probability of observing
    zero bycatch in the level's observed effort and in the total effort.
    """
    _require_finite_population(results)
    replicates = results.replicates
    levels = (
        replicates[["coverage", "observed_units"]]
        .drop_duplicates(subset="coverage")
        .sort_values("coverage")
        .reset_index(drop=True)
    )
    positive = (
        replicates[replicates["observed_total"] > 0]
        .groupby("coverage")
        .size()
        .rename("positive_replicates")
    )
    table = levels.merge(positive, left_on="coverage", right_index=True, how="left")
    table["positive_replicates"] = table["positive_replicates"].fillna(0).astype(np.int64)
    table["prob_zero_observed"] = probability_zero(table["observed_units"], results.rate, results.dispersion)
    table["prob_zero_total"] = float(
        probability_zero(results.total_effort, results.rate, results.dispersion)[0]
    )
    return table


def validate_simulation(results: SimulationResults) -> ValidationResult:
    """Run sanity checks on a finite-population simulation and its summary."""
    _require_finite_population(results)
    failed: list[str] = []
    warnings: list[str] = []

    replicates = results.replicates
    positive_cv = replicates.loc[replicates["observed_total"] > 0, "cv"].to_numpy(dtype=float)
    if not np.all(np.isfinite(positive_cv)):
        failed.append("nan_or_inf_cv")

    summary = results.summary
    if (summary["replicates"] == 0).any():
        warnings.append("insufficient_data")

    populated = summary[summary["replicates"] > 0]
    if not populated.empty:
        ordered = (populated["q50"] <= populated["q80"] + 1e-12) & (populated["q80"] <= populated["q95"] + 1e-12)
        if not ordered.all():
            failed.append("quantile_ordering")
        if (populated["replicates"] < LOW_SAMPLE_FRACTION * results.request.replicates).any():
            warnings.append("low_sample_size")

    status = "PASS" if not failed else "FAIL"
    return ValidationResult(status=status, failed_checks=failed, warnings=warnings)


__all__ = ["ValidationResult", "sample_size_table", "validate_simulation"]
