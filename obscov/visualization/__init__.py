"""Visualization utilities for coverage projections."""

from __future__ import annotations

import logging
from typing import Callable

__all__ = [
    "plot_cv_projection",
    "plot_detection_probability",
    "plot_sample_size",
]


def _missing(name: str, exc: Exception) -> Callable[..., None]:
    def _raiser(*_args, **_kwargs) -> None:
        raise RuntimeError(
            f"Visualization helper '{name}' is unavailable because: {exc}"
        ) from exc

    return _raiser


try:
    from .coverage_plots import (
        plot_cv_projection,
        plot_detection_probability,
        plot_sample_size,
    )
except ImportError as exc:  # pragma: no cover - graceful degradation
    logging.getLogger(__name__).warning(
        "Coverage plots disabled: %s", exc
    )
    plot_cv_projection = _missing("plot_cv_projection", exc)  # type: ignore[assignment]
    plot_detection_probability = _missing("plot_detection_probability", exc)  # type: ignore[assignment]
    plot_sample_size = _missing("plot_sample_size", exc)  # type: ignore[assignment]
