"""
Cooperative periodic scheduler.

Drives the weather tick and the mission tick from one loop. Time comes from
an injectable clock so tests can step it by hand with ManualClock.
"""

import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ManualClock:
    """Clock for tests: time only moves when advance() is called."""

    def __init__(self, start: float = 0.0):
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now

    def sleep(self, seconds: float):
        self.advance(max(0.0, seconds))


class PeriodicTask:
    def __init__(self, name: str, interval: float, callback: Callable[[], None], next_run: float):
        if interval <= 0:
            raise ValueError(f"Task {name!r}: interval must be positive, got {interval}")
        self.name = name
        self.interval = float(interval)
        self.callback = callback
        self.next_run = float(next_run)
        self.cancelled = False
        self.runs = 0

    def cancel(self):
        if not self.cancelled:
            self.cancelled = True
            logger.debug(f"Task {self.name!r} cancelled after {self.runs} runs")

    def __repr__(self):
        state = "cancelled" if self.cancelled else f"next={self.next_run:.2f}"
        return f"PeriodicTask({self.name!r}, every {self.interval}s, {state})"


class Scheduler:
    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.monotonic
        self.tasks: List[PeriodicTask] = []

    def every(self, interval: float, callback: Callable[[], None], name: Optional[str] = None,
              run_now: bool = False) -> PeriodicTask:
        now = self.clock()
        task = PeriodicTask(
            name or getattr(callback, "__name__", "task"),
            interval,
            callback,
            next_run=now if run_now else now + interval,
        )
        self.tasks.append(task)
        logger.debug(f"Scheduled {task!r}")
        return task

    def cancel_all(self):
        for task in self.tasks:
            task.cancel()
        self.tasks = []

    def pending(self) -> List[PeriodicTask]:
        return [t for t in self.tasks if not t.cancelled]

    def run_pending(self, now: Optional[float] = None) -> int:
        """
        Run every task that is due, earliest first. A task that fell several
        periods behind runs once and is rescheduled relative to `now`.
        Returns the number of callbacks run.
        """
        now = self.clock() if now is None else now
        self.tasks = self.pending()
        due = sorted((t for t in self.tasks if t.next_run <= now), key=lambda t: t.next_run)
        ran = 0
        for task in due:
            if task.cancelled:  # cancelled by an earlier callback this round
                continue
            try:
                task.callback()
            except Exception:
                logger.exception(f"Task {task.name!r} failed")
            task.runs += 1
            ran += 1
            task.next_run += task.interval
            if task.next_run <= now:
                task.next_run = now + task.interval
        return ran

    def next_due(self) -> Optional[float]:
        live = self.pending()
        return min(t.next_run for t in live) if live else None

    def run_for(self, duration: float, sleep: Callable[[float], None] = time.sleep) -> int:
        """Cooperative loop for `duration` seconds of clock time."""
        end = self.clock() + duration
        ran = 0
        while True:
            ran += self.run_pending()
            nxt = self.next_due()
            now = self.clock()
            if nxt is None or nxt > end:
                if end > now:
                    sleep(end - now)
                break
            if nxt > now:
                sleep(nxt - now)
        return ran
