"""Input validation utilities."""

from __future__ import annotations

import math
from numbers import Real
from typing import Iterable

import numpy as np


class DomainError(ValueError):
    """Raised when an input parameter lies outside its valid domain."""


def _is_number(value: object) -> bool:
    return isinstance(value, (Real, np.number)) and not isinstance(value, (bool, np.bool_))


def validate_integer(name: str, value: object, *, minimum: int) -> int:
    """Return ``value`` as an int, ensuring it is integral and at least ``minimum``."""
    if not _is_number(value) or not math.isfinite(float(value)) or float(value) != math.floor(float(value)):
        raise DomainError(f"{name} must be an integer >= {minimum} (got {value!r})")
    integer = int(value)
    if integer < minimum:
        raise DomainError(f"{name} must be an integer >= {minimum} (got {value!r})")
    return integer


def validate_rate(rate: object, name: str = "rate") -> float:
    """Event rate (bycatch per unit effort) must be a positive number."""
    if not _is_number(rate) or not math.isfinite(float(rate)) or float(rate) <= 0:
        raise DomainError(f"{name} must be > 0 (got {rate!r})")
    return float(rate)


def validate_dispersion(dispersion: object) -> float:
    """Dispersion index must be a number >= 1."""
    if not _is_number(dispersion) or not math.isfinite(float(dispersion)) or float(dispersion) < 1:
        raise DomainError(f"dispersion must be >= 1 (got {dispersion!r})")
    return float(dispersion)


def validate_unit_counts(n: Iterable[object], name: str = "n") -> np.ndarray:
    """Return ``n`` as an int array of positive unit counts."""
    values = np.atleast_1d(np.asarray(n))
    if values.size == 0:
        raise DomainError(f"{name} must contain at least one unit count")
    if values.dtype == bool or not np.issubdtype(values.dtype, np.number):
        raise DomainError(f"{name} must contain positive integers")
    as_float = values.astype(float)
    if not np.all(np.isfinite(as_float)) or np.any(as_float != np.floor(as_float)):
        raise DomainError(f"{name} must contain positive integers")
    if np.any(as_float <= 0):
        raise DomainError(f"{name} must contain positive integers (got a value <= 0)")
    return as_float.astype(np.int64)


def validate_target_cv(target_cv: object) -> float:
    """Target CV is a proportion in [0, 1)."""
    if not _is_number(target_cv) or not 0 <= float(target_cv) < 1:
        raise DomainError(f"target_cv must be >= 0 and < 1 (got {target_cv!r})")
    return float(target_cv)


def validate_percentile(percentile: object) -> float:
    """Percentile (probability of achieving a target CV) in (0, 100)."""
    if not _is_number(percentile) or not 0 < float(percentile) < 100:
        raise DomainError(f"percentile must be > 0 and < 100 (got {percentile!r})")
    return float(percentile)


def validate_probability(probability: object) -> float:
    """Quantile probability in (0, 1)."""
    if not _is_number(probability) or not 0 < float(probability) < 1:
        raise DomainError(f"probability must be > 0 and < 1 (got {probability!r})")
    return float(probability)


def validate_detection_target(target: object) -> float:
    """Target detection probability (percent) in (0, 100]."""
    if not _is_number(target) or not 0 < float(target) <= 100:
        raise DomainError(f"target detection probability must be > 0 and <= 100 (got {target!r})")
    return float(target)


def validate_coverage(coverage: object) -> np.ndarray:
    """Coverage proportions in (0, 1]."""
    values = np.atleast_1d(np.asarray(coverage, dtype=float))
    if values.size == 0 or not np.all(np.isfinite(values)) or np.any(values <= 0) or np.any(values > 1):
        raise DomainError("coverage must be a proportion > 0 and <= 1")
    return values


def validate_confidence(confidence: object) -> float:
    """Confidence level in (0, 1)."""
    if not _is_number(confidence) or not 0 < float(confidence) < 1:
        raise DomainError(f"confidence must be > 0 and < 1 (got {confidence!r})")
    return float(confidence)


__all__ = [
    "DomainError",
    "validate_confidence",
    "validate_coverage",
    "validate_detection_target",
    "validate_dispersion",
    "validate_integer",
    "validate_percentile",
    "validate_probability",
    "validate_rate",
    "validate_target_cv",
    "validate_unit_counts",
]
