"""Matplotlib figures for CV and detection-probability projections."""

from __future__ import annotations

from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.ticker import MultipleLocator, PercentFormatter
import numpy as np
import pandas as pd

from ..models.results import TargetResult

_BAND_COLORS = {"q50": "#e5e5e5", "q80": "#cccccc", "q95": "#b3b3b3"}


def _setup_figure(figsize=(9, 6)):
    plt.style.use("seaborn-v0_8")
    fig, ax = plt.subplots(figsize=figsize)
    return fig, ax


def _format_percent_axes(ax, *, y: bool = True) -> None:
    ax.set_xlim(0, 100)
    ax.xaxis.set_major_locator(MultipleLocator(10))
    ax.xaxis.set_major_formatter(PercentFormatter(decimals=0))
    if y:
        ax.set_ylim(0, 100)
        ax.yaxis.set_major_locator(MultipleLocator(10))
        ax.yaxis.set_major_formatter(PercentFormatter(decimals=0))


def plot_cv_projection(
    summary: pd.DataFrame,
    *,
    column: str = "qcv",
    percentile: Optional[float] = None,
    target: Optional[TargetResult] = None,
    target_cv: Optional[float] = None,
    title: str = "CV of Bycatch Estimate vs Observer Coverage",
) -> plt.Figure:
    """Plot the CV curve with shaded bands above the 50th/80th/95th percentiles."""
    if summary.empty or column not in summary.columns:
        raise ValueError(f"Summary with a {column!r} column is required")

    data = summary.dropna(subset=[column]).sort_values("coverage")
    x = 100.0 * data["coverage"].to_numpy(dtype=float)
    fig, ax = _setup_figure()

    # Everything above a quantile curve is shaded, lightest for the median.
    for band, color in _BAND_COLORS.items():
        if band not in data.columns or data[band].isna().all():
            continue
        y_band = 100.0 * np.minimum(data[band].to_numpy(dtype=float), 1.0)
        ax.fill_between(x, y_band, 100.0, color=color, linewidth=0, label=f">{band[1:]}th percentile")

    label = f"{percentile:g}th percentile" if percentile is not None else "CV"
    ax.plot(x, 100.0 * data[column].to_numpy(dtype=float), marker="o", color="black", linewidth=1, label=label)

    if target_cv is not None:
        ax.axhline(100.0 * target_cv, color="red", linestyle="--", linewidth=2, label="target CV")
    if target is not None:
        ax.plot(
            target.coverage_percent,
            100.0 * target.target,
            marker="*",
            markersize=14,
            color="red",
            linestyle="none",
            clip_on=False,
            label="min coverage",
        )

    _format_percent_axes(ax)
    ax.set_xlabel("Observer Coverage (%)")
    ax.set_ylabel("CV of Bycatch Estimate (%)")
    ax.set_title(title, fontsize=13, fontweight="bold")
    crowded = bool(((data["coverage"] > 0.7) & (data.get("q95", data[column]) > 0.5)).any())
    ax.legend(loc="lower left" if crowded else "upper right")
    fig.tight_layout()
    return fig


def plot_sample_size(
    table: pd.DataFrame,
    *,
    title: str = "Sample Size for CV Estimates",
) -> plt.Figure:
    """Plot replicates with positive bycatch and the probability of zero bycatch."""
    if table.empty:
        raise ValueError("Sample size table is required")

    x = 100.0 * table["coverage"].to_numpy(dtype=float)
    fig, ax = _setup_figure()
    ax.plot(x, table["positive_replicates"], marker="s", linestyle="none", color="black")
    ax.set_ylim(0, max(float(table["positive_replicates"].max()), 1.0) * 1.1)
    _format_percent_axes(ax, y=False)
    ax.set_xlabel("Observer Coverage (%)")
    ax.set_ylabel("Simulations with Positive Bycatch")
    ax.set_title(title, fontsize=13, fontweight="bold")

    twin = ax.twinx()
    twin.plot(x, 100.0 * table["prob_zero_observed"], color="red", linewidth=2, label="in observed effort")
    twin.axhline(
        100.0 * float(table["prob_zero_total"].iloc[-1]),
        color="red",
        linestyle=":",
        linewidth=2,
        label="in total effort",
    )
    twin.set_ylim(0, 100)
    twin.yaxis.set_major_formatter(PercentFormatter(decimals=0))
    twin.set_ylabel("Probability of Zero Bycatch (%)", color="red")
    twin.tick_params(axis="y", colors="red")
    twin.grid(False)
    twin.legend(loc="center right", frameon=False, labelcolor="red")
    fig.tight_layout()
    return fig


def plot_detection_probability(
    curve: pd.DataFrame,
    *,
    target: Optional[TargetResult] = None,
    title: str = "Probability of Positive Bycatch",
) -> plt.Figure:
    """Plot absolute, total-effort and conditional probabilities of positive bycatch."""
    if curve.empty:
        raise ValueError("Detection curve is required")

    x = 100.0 * curve["coverage"].to_numpy(dtype=float)
    fig, ax = _setup_figure()
    ax.plot(
        x,
        100.0 * curve["prob_positive_conditional"],
        color="black",
        linewidth=2,
        label="in observed effort if total bycatch > 0",
    )
    ax.plot(x, 100.0 * curve["prob_positive"], color="black", linestyle="--", linewidth=2, label="in observed effort")
    ax.axhline(
        100.0 * float(curve["prob_positive_total"].iloc[0]),
        color="black",
        linestyle=":",
        linewidth=2,
        label="in total effort",
    )
    if target is not None:
        ax.axhline(target.target, color="red", linestyle="-.", linewidth=2, label="target probability")
        ax.plot(
            target.coverage_percent,
            target.target,
            marker="*",
            markersize=14,
            color="red",
            linestyle="none",
            clip_on=False,
            label="min coverage",
        )

    _format_percent_axes(ax)
    ax.set_xlabel("Observer Coverage (%)")
    ax.set_ylabel("Probability of Positive Bycatch (%)")
    ax.set_title(title, fontsize=13, fontweight="bold")
    crowded = bool(((curve["coverage"] > 0.6) & (curve["prob_positive"] < 0.3)).any())
    ax.legend(loc="upper left" if crowded else "lower right")
    fig.tight_layout()
    return fig


__all__ = ["plot_cv_projection", "plot_detection_probability", "plot_sample_size"]
