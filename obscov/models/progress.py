"""Progress event emitted while replicates are simulated."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SimulationProgressEvent:
    """A coarse progress update for streaming to a console or dashboard."""

    rows_done: int
    rows_total: int
    message: str = ""
    timestamp: float = field(default_factory=time.time)

    @property
    def fraction(self) -> float:
        if self.rows_total <= 0:
            return 1.0
        return min(self.rows_done / self.rows_total, 1.0)


__all__ = ["SimulationProgressEvent"]
