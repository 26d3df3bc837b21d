"""Data models for simulation requests and results."""

from .progress import SimulationProgressEvent
from .request import SamplingDesign, SimulationRequest
from .results import SimulationResults, TargetResult

__all__ = [
    "SamplingDesign",
    "SimulationProgressEvent",
    "SimulationRequest",
    "SimulationResults",
    "TargetResult",
]
