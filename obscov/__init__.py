"""Observer coverage projections for bycatch estimation.

Simulates how the CV of a mean-per-unit bycatch estimate responds to observer
coverage, and solves for the minimum coverage that meets a target CV or a
target probability of observing bycatch.
"""

from .core.coverage_grid import CoverageLevel, coverage_grid, coverage_levels
from .core.distributions import CountDistribution, DistributionFamily, sample
from .core.simulator import SimulationCancelled, simulate_replicates
from .core.solver import solve_cv_target, solve_detection_target
from .core.summarizer import summarize, summarize_rmse
from .core.validator import DomainError
from .core.zero_probability import (
    detection_curve,
    detection_probability,
    probability_zero,
    upper_confidence_limit,
)
from .engine import CoverageEngine, simulate_cv_coverage
from .models import SamplingDesign, SimulationRequest, SimulationResults, TargetResult

__version__ = "0.1.0"

__all__ = [
    "CountDistribution",
    "CoverageEngine",
    "CoverageLevel",
    "DistributionFamily",
    "DomainError",
    "SamplingDesign",
    "SimulationCancelled",
    "SimulationRequest",
    "SimulationResults",
    "TargetResult",
    "coverage_grid",
    "coverage_levels",
    "detection_curve",
    "detection_probability",
    "probability_zero",
    "sample",
    "simulate_cv_coverage",
    "simulate_replicates",
    "solve_cv_target",
    "solve_detection_target",
    "summarize",
    "summarize_rmse",
    "upper_confidence_limit",
]
