"""
Debounced regeneration scheduler.

Filesystem events arrive in bursts (one multi-file write shows up as several
events), so requests are coalesced: a pass runs once no new request has
arrived for the debounce window. Passes never overlap, and a request made
while a pass is running schedules exactly one more pass afterwards.
"""

import logging
import threading
from typing import Callable, Optional

from task_monitor.constants import TASK_MONITOR_DEBOUNCE_MS


logger = logging.getLogger(__name__)


class RegenerationScheduler:
    """
    Coalesces regeneration requests into single passes.

    State is two flags (pass in flight, requested again) plus at most one
    armed timer. Each armed timer carries a generation number so a timer
    that was cancelled too late to stop its thread does nothing.
    """

    def __init__(
        self,
        regenerate: Callable[[], object],
        debounce_ms: int = TASK_MONITOR_DEBOUNCE_MS
    ):
        """
        Initialize scheduler.

        Args:
            regenerate: Callable running one aggregation + publish pass
            debounce_ms: Quiet window in milliseconds
        """
        self.regenerate = regenerate
        self.debounce_seconds = debounce_ms / 1000.0

        self._condition = threading.Condition()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._in_flight = False
        self._rerun_requested = False
        self._closed = False

        self.pass_count = 0

    def request(self) -> None:
        """Request a regeneration pass."""
        with self._condition:
            if self._closed:
                return

            if self._in_flight:
                self._rerun_requested = True
                return

            self._arm()

    def _arm(self) -> None:
        # Caller holds the condition lock
        if self._timer is not None:
            self._timer.cancel()

        self._generation += 1
        timer = threading.Timer(self.debounce_seconds, self._fire, args=(self._generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._condition:
            if self._closed or generation != self._generation or self._in_flight:
                return
            self._timer = None
            self._in_flight = True

        try:
            self.regenerate()
        except Exception as e:
            logger.error(f"Regeneration pass failed: {e}", exc_info=True)
        finally:
            with self._condition:
                self._in_flight = False
                self.pass_count += 1

                if self._rerun_requested and not self._closed:
                    self._rerun_requested = False
                    self._arm()

                self._condition.notify_all()

    def is_pending(self) -> bool:
        """True while a window is armed or a pass is running."""
        with self._condition:
            return self._timer is not None or self._in_flight

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no window is armed and no pass is running.

        Args:
            timeout: Maximum seconds to wait (None = forever)

        Returns:
            True if idle, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(
                lambda: self._timer is None and not self._in_flight,
                timeout=timeout
            )

    def shutdown(self) -> None:
        """Cancel any pending window and refuse further requests."""
        with self._condition:
            self._closed = True
            self._rerun_requested = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._condition.notify_all()
