"""Serialized, coalescing execution of regeneration passes."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Callable, Optional

from .logging import get_logger

_REMEDIATION = (
    "Generated files were left as they were. Fix the error above and save any "
    "operation file to retry, or run `nxquery sync --verbose` for details."
)


class SchedulerState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"


class ChangeScheduler:
    """Single-worker pass queue: at most one pending pass plus one in flight.

    ``schedule()`` while a pass is waiting to start is coalesced into that
    pass. Once a pass starts, the next ``schedule()`` queues exactly one
    trailing pass, which re-reads the tree and therefore sees every change
    made in the meantime. A failing pass is logged and never blocks later
    passes.
    """

    def __init__(self, task: Callable[[], object], *, name: str = "nxquery-sync") -> None:
        self._task = task
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._pending = False
        self._running = False
        self._closed = False
        self._last: Optional[Future] = None
        self.pass_count = 0
        self.failure_count = 0
        self.logger = get_logger("scheduler")

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            if self._running:
                return SchedulerState.RUNNING
            if self._pending:
                return SchedulerState.SCHEDULED
            return SchedulerState.IDLE

    def schedule(self) -> Optional[Future]:
        """Queue a pass unless one is already waiting; return its future or None."""
        with self._lock:
            if self._closed:
                self.logger.debug("Scheduler closed; ignoring sync request")
                return None
            if self._pending:
                self.logger.debug("Sync already pending; coalescing request")
                return None
            self._pending = True
            future = self._executor.submit(self._run)
            self._last = future
            return future

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Block until every pass scheduled so far has finished."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                last = self._last
            if last is None:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                last.result(timeout=remaining)
            except FutureTimeoutError:
                return False
            with self._lock:
                if self._last is last:
                    return True

    def close(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def _run(self) -> None:
        with self._lock:
            self._pending = False
            self._running = True
        try:
            self._task()
        except Exception:
            self.failure_count += 1
            self.logger.exception("Sync pass failed. %s", _REMEDIATION)
        finally:
            with self._lock:
                self._running = False
                self.pass_count += 1


__all__ = ["ChangeScheduler", "SchedulerState"]
