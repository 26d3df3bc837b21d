"""Plain-text recommendations and caveats for reporting collaborators."""

from __future__ import annotations

from typing import Optional

from ..models.results import TargetResult
from ..utils.numbers import format_number, signif

CAVEAT = (
    "Caveat: projections assume representative observer coverage and no hierarchical "
    "sources of variance (e.g., vessel- or trip-level variation). Bycatch estimation CV "
    "is therefore likely biased low, and the probability of observing bycatch biased high, "
    "relative to the real world. More conservative projections can be obtained by using "
    "higher-level units of effort (e.g., bycatch per trip and total trips instead of "
    "bycatch per set and total sets)."
)
SIMULATION_NOTE = "Note that results are simulation-based and may vary slightly with repetition."
REVIEW_CAVEATS = "Please review the caveats in the associated documentation."
INSUFFICIENT_DATA = "insufficient data"


def cv_recommendation(result: Optional[TargetResult], target_cv: float, percentile: Optional[float]) -> str:
    """Recommendation for the minimum coverage achieving a target CV."""
    target_pct = format_number(100.0 * target_cv)
    if result is None:
        return (
            f"No simulated observer coverage achieved {target_pct}% CV or less "
            f"({INSUFFICIENT_DATA}).\n{SIMULATION_NOTE}"
        )
    if percentile is None:
        condition = f"{target_pct}% CV or less"
    else:
        condition = f"{target_pct}% CV or less with {format_number(percentile)}% probability"
    return (
        f"Minimum observer coverage to achieve {condition} is "
        f"{format_number(signif(result.coverage_percent, 3))}% ({result.observed_units} units).\n"
        f"{REVIEW_CAVEATS}\n{SIMULATION_NOTE}"
    )


def detection_recommendation(result: TargetResult) -> str:
    """Recommendation for the minimum coverage achieving a detection probability."""
    return (
        f"Minimum observer coverage to achieve at least {format_number(result.target)}% "
        f"probability of observing bycatch when total bycatch is positive is "
        f"{format_number(signif(result.coverage_percent, 3))}% ({result.observed_units} units).\n"
        f"{REVIEW_CAVEATS}"
    )


__all__ = [
    "CAVEAT",
    "INSUFFICIENT_DATA",
    "REVIEW_CAVEATS",
    "SIMULATION_NOTE",
    "cv_recommendation",
    "detection_recommendation",
]
