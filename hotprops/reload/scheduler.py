"""
Fixed-rate scheduling of background reload checks.
"""

import itertools
import threading
import time
from typing import Callable, List, Optional

from hotprops.core.enums import TimeUnit
from hotprops.logger import get_hotprops_logger


class ScheduledTask:
    """Handle on a task scheduled with ReloadScheduler."""

    def __init__(self, name: str):
        self.name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._on_cancel: Optional[Callable[['ScheduledTask'], None]] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        self._cancelled.set()
        if self._on_cancel is not None:
            self._on_cancel(self)

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)


class ReloadScheduler:
    """
    Runs tasks periodically, each on its own daemon thread.

    A task that raises is logged and keeps its schedule; only cancel() or
    shutdown() stop it.
    """

    def __init__(self, name: str = "hotprops-reload"):
        self.name = name
        self.logger = get_hotprops_logger().bind(component="ReloadScheduler")
        self._lock = threading.Lock()
        self._tasks: List[ScheduledTask] = []
        self._counter = itertools.count(1)
        self._shutdown = False

    def schedule_at_fixed_rate(self, task: Callable[[], object], initial_delay: float,
                               period: float, unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        """
        Run `task` every `period` starting after `initial_delay`, both
        expressed in `unit`.

        Raises:
            ValueError: If period is not positive or initial_delay is negative
            RuntimeError: If the scheduler has been shut down
        """
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        if initial_delay < 0:
            raise ValueError(f"initial_delay must not be negative, got {initial_delay}")

        delay_seconds = unit.to_seconds(initial_delay)
        period_seconds = unit.to_seconds(period)

        with self._lock:
            if self._shutdown:
                raise RuntimeError("scheduler has been shut down")
            handle = ScheduledTask(f"{self.name}-{next(self._counter)}")
            handle._on_cancel = self._discard
            handle._thread = threading.Thread(
                target=self._run,
                args=(handle, task, delay_seconds, period_seconds),
                name=handle.name,
                daemon=True
            )
            self._tasks.append(handle)
            handle._thread.start()

        self.logger.info("Task scheduled", task=handle.name,
                         initial_delay=delay_seconds, period=period_seconds)
        return handle

    def shutdown(self, wait: bool = False, timeout: Optional[float] = None):
        """Cancel every scheduled task and refuse new ones."""
        with self._lock:
            self._shutdown = True
            tasks = list(self._tasks)
            self._tasks.clear()

        for handle in tasks:
            handle.cancel()
        if wait:
            for handle in tasks:
                handle.join(timeout)

        self.logger.info("Scheduler shut down", tasks=len(tasks))

    @property
    def scheduled_tasks(self) -> List[ScheduledTask]:
        """Tasks that have not been cancelled."""
        with self._lock:
            return list(self._tasks)

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def _run(self, handle: ScheduledTask, task: Callable[[], object], delay: float, period: float):
        next_run = time.monotonic() + delay
        while not handle._cancelled.wait(max(0.0, next_run - time.monotonic())):
            try:
                task()
            except Exception:
                self.logger.exception("Scheduled task failed", task=handle.name)
            next_run += period
        self._discard(handle)

    def _discard(self, handle: ScheduledTask):
        with self._lock:
            if handle in self._tasks:
                self._tasks.remove(handle)
