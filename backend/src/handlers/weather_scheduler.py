"""Periodic trigger for weather update cycles."""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from utils.constants import UPDATE_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class WeatherUpdateScheduler:
    """Run an update cycle at startup and then on a fixed interval.

    At most one cycle runs at a time. A tick that finds a cycle still in
    flight is skipped, not queued. Cycle exceptions are logged and never
    escape the scheduler.
    """

    def __init__(
        self,
        run_cycle: Callable[[], Any],
        interval_seconds: float = UPDATE_INTERVAL_SECONDS,
    ):
        self._run_cycle = run_cycle
        self.interval_seconds = interval_seconds
        self._in_flight = threading.Lock()
        # Skips are counted from the ticker and from worker threads
        self._skip_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._ticker: threading.Thread | None = None

        self.cycles_completed = 0
        self.cycles_failed = 0
        self.cycles_skipped = 0
        self.last_error: str | None = None
        self.last_run_at: datetime | None = None

    @property
    def is_updating(self) -> bool:
        return self._in_flight.locked()

    @property
    def is_started(self) -> bool:
        return self._ticker is not None and self._ticker.is_alive()

    def _record_skip(self) -> None:
        with self._skip_lock:
            self.cycles_skipped += 1
        logger.warning("Previous update still in progress, skipping...")

    def run_once(self) -> bool:
        """Run one cycle in the calling thread.

        Returns:
            False if the cycle was skipped because another one is in flight
        """
        if not self._in_flight.acquire(blocking=False):
            self._record_skip()
            return False

        try:
            self.last_run_at = datetime.now(UTC)
            self._run_cycle()
            self.cycles_completed += 1
            self.last_error = None
        except Exception as e:
            self.cycles_failed += 1
            self.last_error = str(e)
            logger.error(f"Update failed: {e}", exc_info=True)
        finally:
            self._in_flight.release()

        return True

    def trigger(self) -> bool:
        """Start a cycle in a worker thread unless one is in flight."""
        if self.is_updating:
            self._record_skip()
            return False

        worker = threading.Thread(
            target=self.run_once, name="weather-update", daemon=True
        )
        worker.start()
        return True

    def _tick_loop(self) -> None:
        self.trigger()
        while not self._stop_event.wait(self.interval_seconds):
            self.trigger()

    def start(self) -> None:
        """Start the ticker; the first cycle begins immediately."""
        if self.is_started:
            return
        self._stop_event.clear()
        self._ticker = threading.Thread(
            target=self._tick_loop, name="weather-scheduler", daemon=True
        )
        self._ticker.start()
        logger.info(
            f"Weather updates scheduled every {self.interval_seconds / 3600:g}h"
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the ticker. A cycle already in flight runs to completion."""
        self._stop_event.set()
        if self._ticker is not None:
            self._ticker.join(timeout)
            self._ticker = None
