"""Background execution helpers for long-running coverage simulations."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from queue import Empty, Queue
from typing import Callable, Optional

from ..models.progress import SimulationProgressEvent

ProgressReporter = Callable[[int, int, str], None]
Task = Callable[[ProgressReporter, threading.Event], object]


class AnalysisRunner:
    """Run an engine call in the background with progress streaming and cancellation."""

    def __init__(self, *, max_workers: int = 1) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="obscov-runner")
        self._future: Optional[Future] = None
        self._progress: "Queue[SimulationProgressEvent]" = Queue()
        self._cancel_event = threading.Event()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ status
    @property
    def done(self) -> bool:
        with self._lock:
            return self._future is not None and self._future.done()

    # ------------------------------------------------------------------ control
    def start(self, task: Task) -> None:
        """Submit a task accepting a progress reporter and a cancel event.

        Example::

            runner.start(lambda report, cancel: engine.simulate(
                request, progress_callback=report, cancel_event=cancel))
        """
        with self._lock:
            if self._future is not None and not self._future.done():
                raise RuntimeError("AnalysisRunner is already executing a task.")
            self._progress.queue.clear()
            self._cancel_event = threading.Event()
            cancel_event = self._cancel_event

            def _invoke() -> object:
                return task(self._enqueue_progress, cancel_event)

            self._future = self._executor.submit(_invoke)

    def cancel(self) -> None:
        """Request cancellation; a running simulation stops at its next chunk."""
        with self._lock:
            self._cancel_event.set()
            if self._future and not self._future.done():
                self._future.cancel()

    # ------------------------------------------------------------------ progress
    def _enqueue_progress(self, step: int, total: int, message: str) -> None:
        self._progress.put(SimulationProgressEvent(rows_done=step, rows_total=total, message=message))

    def drain_progress(self) -> list[SimulationProgressEvent]:
        updates: list[SimulationProgressEvent] = []
        while True:
            try:
                updates.append(self._progress.get_nowait())
            except Empty:
                break
        return updates

    # ------------------------------------------------------------------ results
    def result(self, timeout: Optional[float] = None) -> object:
        with self._lock:
            if self._future is None:
                raise RuntimeError("AnalysisRunner has not started a task.")
            future = self._future
        return future.result(timeout=timeout)

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        with self._lock:
            if self._future is None:
                return None
            future = self._future
        return future.exception(timeout=timeout)

    def reset(self) -> None:
        with self._lock:
            self._future = None
            self._cancel_event = threading.Event()
            self._progress.queue.clear()

    # ------------------------------------------------------------------- cleanup
    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


__all__ = ["AnalysisRunner", "ProgressReporter"]
