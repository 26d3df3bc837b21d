"""Reporting helpers."""

from .recommendation import (
    CAVEAT,
    INSUFFICIENT_DATA,
    SIMULATION_NOTE,
    cv_recommendation,
    detection_recommendation,
)

__all__ = [
    "CAVEAT",
    "INSUFFICIENT_DATA",
    "SIMULATION_NOTE",
    "cv_recommendation",
    "detection_recommendation",
]
