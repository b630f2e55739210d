"""
Recurring background task - fixed-interval loop on a daemon thread.

Scheduling rules shared by the polling and reminder schedulers:
- Ticks fire on a fixed schedule (start + n * interval); provider latency
  never stretches the interval.
- Cycles of the same task never overlap. A cycle that overruns its
  interval skips the ticks it missed instead of queueing them, and a
  manual ``run_once`` while a cycle is in flight is skipped.
- ``stop()`` is cooperative: the stop event is checked between work
  items, and the thread is joined for a bounded grace period.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class RecurringTask(ABC):
    """Base class for the background schedulers."""

    #: Used in thread names and log lines
    name: str = 'task'

    def __init__(self, interval_seconds: float, shutdown_grace_seconds: float = 10.0):
        if interval_seconds <= 0:
            raise ValueError('interval_seconds must be positive')
        self.interval_seconds = interval_seconds
        self.shutdown_grace_seconds = shutdown_grace_seconds

        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self._cycle_count = 0
        self._error_count = 0
        self._skipped_ticks = 0
        self._last_cycle_time: float = 0
        self._last_cycle_seconds: float = 0

    @abstractmethod
    def run_cycle(self) -> int:
        """Do one pass over the work. Returns the number of items handled."""

    @property
    def stopping(self) -> bool:
        """True once stop() was requested; cycles should bail out early."""
        return self._stop_event.is_set()

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def run_once(self) -> Optional[int]:
        """
        Execute one cycle unless another one is already running.

        Returns the cycle's item count, or None if skipped or failed.
        """
        if not self._cycle_lock.acquire(blocking=False):
            self._skipped_ticks += 1
            logger.warning(f'{self.name}: previous cycle still running, skipping')
            return None

        started = time.monotonic()
        try:
            count = self.run_cycle()
            self._cycle_count += 1
            return count
        except Exception as e:
            # A failed sweep (e.g. database down) must not kill the loop;
            # the next tick is the retry.
            self._error_count += 1
            logger.error(f'{self.name} cycle failed: {e}')
            return None
        finally:
            self._last_cycle_time = time.time()
            self._last_cycle_seconds = time.monotonic() - started
            self._cycle_lock.release()

    def run_continuous(self) -> None:
        """
        Run cycles on the fixed schedule until stop() is called.

        This method blocks - use start_background() for non-blocking.
        """
        logger.info(f'Starting {self.name} (interval={self.interval_seconds}s)')

        next_tick = time.monotonic() + self.interval_seconds
        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            self.run_once()

            next_tick += self.interval_seconds
            now = time.monotonic()
            if now >= next_tick:
                missed = int((now - next_tick) // self.interval_seconds) + 1
                self._skipped_ticks += missed
                logger.warning(f'{self.name}: cycle overran its interval, skipping {missed} tick(s)')
                next_tick += missed * self.interval_seconds

        logger.info(f'{self.name} stopped')

    def start_background(self) -> None:
        """Start the loop in a background thread."""
        if self.running:
            logger.warning(f'{self.name} already running')
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_continuous,
            name=f'gatewatch-{self.name}',
            daemon=True,
        )
        self._thread.start()
        logger.info(f'Background {self.name} started')

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Request shutdown and wait up to the grace period.

        Returns True if the thread finished in time.
        """
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self.shutdown_grace_seconds if timeout is None else timeout)
            if self._thread.is_alive():
                logger.warning(f'{self.name} did not stop within the grace period, abandoning cycle')
                return False
        return True

    @property
    def stats(self) -> dict:
        """Get loop statistics."""
        return {
            'name': self.name,
            'interval_seconds': self.interval_seconds,
            'cycle_count': self._cycle_count,
            'error_count': self._error_count,
            'skipped_ticks': self._skipped_ticks,
            'last_cycle_time': self._last_cycle_time,
            'last_cycle_seconds': round(self._last_cycle_seconds, 3),
            'running': self.running,
        }
