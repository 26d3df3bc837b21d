"""Closed-form probabilities of observing zero events.

All functions here are analytic: they assume representative coverage and no
hierarchical (vessel- or trip-level) variance, so the probability of observing
zero events at a given coverage is likely biased low relative to the real world.
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd

from .coverage_grid import detection_grid, observed_units_for
from .distributions import CountDistribution
from .validator import (
    validate_confidence,
    validate_coverage,
    validate_dispersion,
    validate_integer,
    validate_unit_counts,
)


def log_probability_zero(rate: float, dispersion: float = 1.0) -> float:
    """Log probability that one effort unit records zero events."""
    return CountDistribution(rate=rate, dispersion=dispersion).log_pmf_zero()


def probability_zero(n, rate: float, dispersion: float = 1.0) -> np.ndarray:
    """Probability of zero events in each of the unit counts ``n``.

    ``pmf(0) ** n`` for the Poisson (``dispersion == 1``) or negative binomial
    distribution with the given rate. Returns an array the same length as ``n``.
    """
    units = validate_unit_counts(n)
    p0 = math.exp(log_probability_zero(rate, dispersion))
    return np.power(p0, units.astype(float))


def detection_probability(coverage, total_effort: int, rate: float, dispersion: float = 1.0) -> np.ndarray:
    """Percent probability of observing any event, given that any event occurs.

    ``coverage`` may be a scalar or array of proportions; the observed effort is
    treated as continuous so this is the exact forward map of the
    detection-target solver.
    """
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    proportions = validate_coverage(coverage)
    log_p0 = log_probability_zero(rate, dispersion)
    prob_total = -math.expm1(total_effort * log_p0)
    prob_observed = -np.expm1(proportions * total_effort * log_p0)
    return 100.0 * prob_observed / prob_total


def detection_curve(total_effort: int, rate: float, dispersion: float = 1.0) -> pd.DataFrame:
    """Tabulate detection probabilities across coverage levels.

    Columns: ``coverage``, ``observed_units``, ``prob_positive`` (any event in
    observed effort), ``prob_positive_total`` (any event in total effort) and
    ``prob_positive_conditional`` (observed given it occurs in total effort).
    """
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    proportions = detection_grid(total_effort)
    units = observed_units_for(proportions, total_effort)
    keep = units > 0
    proportions, units = proportions[keep], units[keep]

    prob_positive = 1.0 - probability_zero(units, rate, dispersion)
    prob_total = float(1.0 - probability_zero(total_effort, rate, dispersion)[0])
    return pd.DataFrame(
        {
            "coverage": proportions,
            "observed_units": units,
            "prob_positive": prob_positive,
            "prob_positive_total": prob_total,
            "prob_positive_conditional": prob_positive / prob_total,
        }
    )


def upper_confidence_limit(n, dispersion: float = 1.0, confidence: float = 0.95) -> np.ndarray:
    """Upper confidence limit of bycatch rate when zero events were observed.

    The largest rate for which observing zero events in ``n`` units still has
    probability ``1 - confidence``.
    """
    units = validate_unit_counts(n)
    dispersion = validate_dispersion(dispersion)
    confidence = validate_confidence(confidence)
    neg_log_alpha = -math.log1p(-confidence)
    if dispersion == 1:
        scale = 1.0
    else:
        scale = (dispersion - 1) / math.log(dispersion)
    return scale * neg_log_alpha / units.astype(float)


__all__ = [
    "detection_curve",
    "detection_probability",
    "log_probability_zero",
    "probability_zero",
    "upper_confidence_limit",
]
