"""Runtime configuration for the observer coverage engine.

Values can be overridden through environment variables so batch runs and the
CLI can be tuned without code changes.
"""

from __future__ import annotations

import os
from typing import Optional, Tuple


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


# Simulation defaults
DEFAULT_REPLICATES = 1000
DEFAULT_DISPERSION = 2.0
RANDOM_SEED: Optional[int] = _env_int("OBSCOV_RANDOM_SEED", None)

# Execution
MAX_WORKERS: int = _env_int("OBSCOV_MAX_WORKERS", 1) or 1
PROGRESS_INTERVAL: int = _env_int("OBSCOV_PROGRESS_INTERVAL", 500) or 500
# Upper bound on simulated counts held in memory per draw
CHUNK_CELLS: int = _env_int("OBSCOV_CHUNK_CELLS", 2_000_000) or 2_000_000

# Target defaults
DEFAULT_PERCENTILE = 80.0
DEFAULT_TARGET_CV = 0.30
DEFAULT_TARGET_DETECTION = 80.0
DIAGNOSTIC_QUANTILES: Tuple[float, ...] = (0.50, 0.80, 0.95)

# Grid policy
SMALL_EFFORT_THRESHOLD = 20
DETECTION_GRID_THRESHOLD = 1000

# Logging
LOG_LEVEL: str = os.environ.get("OBSCOV_LOG_LEVEL", "WARNING").upper()


__all__ = [
    "CHUNK_CELLS",
    "DEFAULT_DISPERSION",
    "DEFAULT_PERCENTILE",
    "DEFAULT_REPLICATES",
    "DEFAULT_TARGET_CV",
    "DEFAULT_TARGET_DETECTION",
    "DETECTION_GRID_THRESHOLD",
    "DIAGNOSTIC_QUANTILES",
    "LOG_LEVEL",
    "MAX_WORKERS",
    "PROGRESS_INTERVAL",
    "RANDOM_SEED",
    "SMALL_EFFORT_THRESHOLD",
]
