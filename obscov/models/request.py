"""Simulation request model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from ..config import DEFAULT_DISPERSION, DEFAULT_REPLICATES
from ..core.distributions import CountDistribution
from ..core.validator import DomainError, validate_dispersion, validate_integer, validate_rate


class SamplingDesign(str, Enum):
    """How observed effort is simulated for each replicate."""

    # Draw observed units directly; CV from the sample variance with fpc.
    FINITE_POPULATION = "finite_population"
    # Draw a full fishery, subsample it; CV from error against the nominal rate.
    RESAMPLING = "resampling"

    @property
    def min_units(self) -> int:
        """Fewest observed units a coverage level needs to be usable."""
        return 2 if self is SamplingDesign.FINITE_POPULATION else 1

    @property
    def min_total_effort(self) -> int:
        return 3 if self is SamplingDesign.FINITE_POPULATION else 2


@dataclass(frozen=True)
class SimulationRequest:
    """Parameters for one CV-vs-coverage simulation."""

    total_effort: int
    rate: float
    dispersion: float = DEFAULT_DISPERSION
    replicates: int = DEFAULT_REPLICATES
    design: SamplingDesign = SamplingDesign.FINITE_POPULATION
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            design = SamplingDesign(self.design)
        except ValueError as exc:
            raise DomainError(f"design must be one of {[d.value for d in SamplingDesign]}") from exc
        object.__setattr__(self, "design", design)
        object.__setattr__(
            self,
            "total_effort",
            validate_integer("total_effort", self.total_effort, minimum=design.min_total_effort),
        )
        object.__setattr__(self, "rate", validate_rate(self.rate))
        object.__setattr__(self, "dispersion", validate_dispersion(self.dispersion))
        object.__setattr__(self, "replicates", validate_integer("replicates", self.replicates, minimum=1))
        if self.seed is not None:
            object.__setattr__(self, "seed", validate_integer("seed", self.seed, minimum=0))

    def distribution(self) -> CountDistribution:
        return CountDistribution(rate=self.rate, dispersion=self.dispersion)

    def to_metadata(self) -> Dict[str, object]:
        """Echo the request parameters as plain values."""
        return {
            "total_effort": self.total_effort,
            "rate": self.rate,
            "dispersion": self.dispersion,
            "replicates": self.replicates,
            "design": self.design.value,
            "seed": self.seed,
        }

    @classmethod
    def from_metadata(cls, metadata: Dict[str, object]) -> "SimulationRequest":
        seed = metadata.get("seed")
        return cls(
            total_effort=metadata["total_effort"],
            rate=metadata["rate"],
            dispersion=metadata.get("dispersion", DEFAULT_DISPERSION),
            replicates=metadata.get("replicates", DEFAULT_REPLICATES),
            design=SamplingDesign(metadata.get("design", SamplingDesign.FINITE_POPULATION.value)),
            seed=None if seed is None else int(seed),
        )


__all__ = ["SamplingDesign", "SimulationRequest"]
