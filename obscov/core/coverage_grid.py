"""Observer coverage grids evaluated by the simulator and the detection curve."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from ..config import DETECTION_GRID_THRESHOLD, SMALL_EFFORT_THRESHOLD
from .validator import validate_integer

# 0.1%-0.5%, 1%-5%, then 10%-100% in 5% steps
_FIXED_GRID = np.array(
    [i / 1000 for i in range(1, 6)]
    + [i / 100 for i in range(1, 6)]
    + [i / 20 for i in range(2, 21)],
    dtype=float,
)


@dataclass(frozen=True)
class CoverageLevel:
    """A coverage proportion and the number of effort units it observes."""

    proportion: float
    observed_units: int

    @property
    def percent(self) -> float:
        return 100.0 * self.proportion


def observed_units_for(proportions: np.ndarray, total_effort: int) -> np.ndarray:
    """Map coverage proportions to observed unit counts (round half to even)."""
    return np.rint(np.asarray(proportions, dtype=float) * total_effort).astype(np.int64)


def coverage_grid(total_effort: int) -> np.ndarray:
    """Return the strictly increasing coverage proportions to simulate.

    Small fisheries (fewer than 20 units) use every achievable unit count so no
    level is skipped; larger ones use a fixed grid that is fine at low coverage,
    where CV changes steeply, and coarse above 10%.
    """
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    if total_effort < SMALL_EFFORT_THRESHOLD:
        return np.arange(1, total_effort + 1, dtype=float) / total_effort
    return _FIXED_GRID.copy()


def coverage_levels(total_effort: int, min_units: int = 1) -> List[CoverageLevel]:
    """Return usable coverage levels with at least ``min_units`` observed units."""
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    proportions = coverage_grid(total_effort)
    units = observed_units_for(proportions, total_effort)
    return [
        CoverageLevel(proportion=float(p), observed_units=int(n))
        for p, n in zip(proportions, units)
        if n >= min_units
    ]


def detection_grid(total_effort: int) -> np.ndarray:
    """Finer grid for analytic detection curves (every unit, or 0.1% steps)."""
    total_effort = validate_integer("total_effort", total_effort, minimum=2)
    if total_effort < DETECTION_GRID_THRESHOLD:
        return np.arange(1, total_effort + 1, dtype=float) / total_effort
    return np.arange(1, 1001, dtype=float) / 1000


__all__ = [
    "CoverageLevel",
    "coverage_grid",
    "coverage_levels",
    "detection_grid",
    "observed_units_for",
]
