"""Result data models handed to reporting and plotting collaborators."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_PERCENTILE
from .request import SamplingDesign, SimulationRequest


class SimulationResults(BaseModel):
    """Replicate table, per-level summary and the echoed request."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    request: SimulationRequest = Field(..., description="Parameters the simulation ran with")
    replicates: pd.DataFrame = Field(
        ...,
        description=(
            "One row per (coverage level, replicate). Finite-population columns: "
            "['coverage', 'observed_units', 'replicate', 'observed_total', "
            "'observed_variance', 'observed_rate', 'fpc', 'standard_error', 'cv']"
        ),
    )
    summary: pd.DataFrame = Field(..., description="One row per coverage level")
    percentile: float = Field(
        DEFAULT_PERCENTILE,
        gt=0,
        lt=100,
        description="Percentile used for the summary's 'qcv' column",
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def total_effort(self) -> int:
        return self.request.total_effort

    @property
    def rate(self) -> float:
        return self.request.rate

    @property
    def dispersion(self) -> float:
        return self.request.dispersion

    @property
    def design(self) -> SamplingDesign:
        return self.request.design

    def parameters(self) -> Dict[str, Any]:
        """Input parameters echoed for collaborators."""
        return self.request.to_metadata()


class TargetResult(BaseModel):
    """Minimum observer coverage meeting a precision or detection target."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["cv", "detection"]
    target: float = Field(..., description="Target CV (proportion) or detection probability (%)")
    min_coverage: float = Field(..., ge=0.0, le=1.0, description="Minimum coverage proportion")
    observed_units: int = Field(..., ge=0, description="Observed effort units, rounded up")
    total_effort: int = Field(..., ge=2)
    method: Literal["interpolate", "scan", "analytic"]
    percentile: Optional[float] = Field(
        None, description="Probability (%) of achieving the target CV; CV mode only"
    )

    @property
    def coverage_percent(self) -> float:
        return 100.0 * self.min_coverage


__all__ = ["SimulationResults", "TargetResult"]
