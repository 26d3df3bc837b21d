"""Per-coverage-level summaries of simulated CVs."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from ..config import DIAGNOSTIC_QUANTILES
from .validator import DomainError, validate_probability, validate_rate

SUMMARY_COLUMNS = [
    "coverage",
    "observed_units",
    "replicates",
    "mean_total",
    "qcv",
    "q50",
    "q80",
    "q95",
    "min_total",
    "max_total",
]


def quantile_label(probability: float) -> str:
    """Column label for a quantile, e.g. 0.95 -> 'q95'."""
    return f"q{int(round(probability * 100))}"


def _require_columns(frame: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise DomainError(f"replicate table is missing column(s): {', '.join(missing)}")


def summarize(
    replicates: pd.DataFrame,
    probability: float = 0.8,
    *,
    quantiles: Sequence[float] = DIAGNOSTIC_QUANTILES,
) -> pd.DataFrame:
    """Summarize finite-population replicates by coverage level.

    Replicates with zero observed events have an undefined CV and are excluded
    from every statistic. A level where no replicate observed anything is kept
    with ``replicates == 0`` and NaN statistics so reports can flag it as
    insufficient data. Quantiles are the type-7 (linear interpolation)
    definition.
    """
    probability = validate_probability(probability)
    _require_columns(replicates, ["coverage", "observed_units", "observed_total", "cv"])

    levels = (
        replicates[["coverage", "observed_units"]]
        .drop_duplicates(subset="coverage")
        .sort_values("coverage")
        .reset_index(drop=True)
    )
    positive = replicates[replicates["observed_total"] > 0]
    grouped = positive.groupby("coverage")
    stats = grouped.agg(
        replicates=("cv", "size"),
        mean_total=("observed_total", "mean"),
        min_total=("observed_total", "min"),
        max_total=("observed_total", "max"),
    )
    stats["qcv"] = grouped["cv"].quantile(probability, interpolation="linear")
    for q in quantiles:
        stats[quantile_label(q)] = grouped["cv"].quantile(validate_probability(q), interpolation="linear")

    summary = levels.merge(stats, left_on="coverage", right_index=True, how="left")
    summary["replicates"] = summary["replicates"].fillna(0).astype(np.int64)
    ordered = [c for c in SUMMARY_COLUMNS if c in summary.columns]
    extra = [c for c in summary.columns if c not in ordered]
    return summary[ordered + extra]


def summarize_rmse(replicates: pd.DataFrame, rate: float) -> pd.DataFrame:
    """Resampling-design summary: root mean square error relative to ``rate``."""
    rate = validate_rate(rate)
    _require_columns(replicates, ["coverage", "observed_units", "error"])
    summary = (
        replicates.groupby("coverage")
        .agg(
            observed_units=("observed_units", "first"),
            replicates=("error", "size"),
            mean_square_error=("error", lambda err: float(np.mean(np.square(err)))),
        )
        .reset_index()
        .sort_values("coverage")
        .reset_index(drop=True)
    )
    summary["cv"] = np.sqrt(summary["mean_square_error"]) / rate
    return summary.drop(columns="mean_square_error")


__all__ = ["SUMMARY_COLUMNS", "quantile_label", "summarize", "summarize_rmse"]
