"""Numeric helper functions shared across the application."""

from __future__ import annotations

import math
from typing import Optional


def decimalize(value: Optional[float]) -> Optional[float]:
    """Convert percentage-based inputs to decimals while preserving None."""
    if value is None:
        return None
    if value > 1.5:
        return float(value / 100.0)
    return float(value)


def signif(value: float, digits: int = 3) -> float:
    """Round ``value`` to ``digits`` significant digits."""
    if value == 0 or not math.isfinite(value):
        return value
    return round(value, digits - 1 - int(math.floor(math.log10(abs(value)))))


def format_number(value: float) -> str:
    """Drop a trailing '.0' from whole numbers for display."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


__all__ = ["decimalize", "format_number", "signif"]
