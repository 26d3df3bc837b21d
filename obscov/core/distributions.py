"""Count distributions for per-unit event (bycatch) draws."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .validator import validate_dispersion, validate_integer, validate_rate


class DistributionFamily(str, Enum):
    """Supported count distribution families."""

    POISSON = "poisson"
    NEGATIVE_BINOMIAL = "negative_binomial"


@dataclass(frozen=True)
class CountDistribution:
    """Per-unit event counts with mean ``rate`` and variance ``rate * dispersion``.

    A dispersion index of 1 is the Poisson limit; anything above selects a
    negative binomial with ``size = rate / (dispersion - 1)`` and
    ``prob = 1 / dispersion``.
    """

    rate: float
    dispersion: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", validate_rate(self.rate))
        object.__setattr__(self, "dispersion", validate_dispersion(self.dispersion))

    @property
    def family(self) -> DistributionFamily:
        if self.dispersion == 1:
            return DistributionFamily.POISSON
        return DistributionFamily.NEGATIVE_BINOMIAL

    @property
    def size(self) -> float:
        """Negative binomial size parameter (infinite for Poisson)."""
        if self.family is DistributionFamily.POISSON:
            return math.inf
        return self.rate / (self.dispersion - 1)

    @property
    def prob(self) -> float:
        return 1.0 / self.dispersion

    @property
    def variance(self) -> float:
        return self.rate * self.dispersion

    def log_pmf_zero(self) -> float:
        """Natural log of the probability that a single unit records zero events."""
        if self.family is DistributionFamily.POISSON:
            return -self.rate
        return -self.size * math.log(self.dispersion)

    def sample(self, size, rng: np.random.Generator) -> np.ndarray:
        """Draw counts with the given output shape from ``rng``."""
        if self.family is DistributionFamily.POISSON:
            return rng.poisson(self.rate, size=size)
        return rng.negative_binomial(self.size, self.prob, size=size)


def sample(
    n: int,
    rate: float,
    dispersion: float = 1.0,
    *,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Draw ``n`` non-negative integer counts.

    A fresh entropy-seeded generator is used unless ``rng`` or ``seed`` is given.
    """
    n = validate_integer("n", n, minimum=0)
    distribution = CountDistribution(rate=rate, dispersion=dispersion)
    if rng is None:
        rng = np.random.default_rng(seed)
    return distribution.sample(n, rng)


__all__ = ["CountDistribution", "DistributionFamily", "sample"]
