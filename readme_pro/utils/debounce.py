# readme_pro/utils/debounce.py

"""
Debounce primitive for autosave.

Every trigger cancels the pending timer and schedules a new one, so a burst
of edits produces a single call ``delay`` seconds after the last edit. An
optional suppression guard is evaluated when the timer fires, not when the
edit happens.
"""

import logging
import threading
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class Debouncer:
    """Coalesces rapid calls into one delayed call."""

    def __init__(
        self,
        func: Callable[..., Any],
        delay: float = 0.5,
        is_suppressed: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize the debouncer.

        Args:
            func: Callable to run once the edits settle
            delay: Seconds to wait after the last trigger
            is_suppressed: Guard checked at fire time; a true result skips the call
        """
        self.func = func
        self.delay = delay
        self.is_suppressed = is_suppressed
        self.fire_count = 0
        self.suppressed_count = 0
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[tuple, dict]] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """Cancel any pending call and reschedule with the latest arguments."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def flush(self) -> bool:
        """
        Run the pending call now instead of waiting for the timer.

        Returns:
            True if a call was pending and was not suppressed
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
        return self._fire()

    def _fire(self) -> bool:
        with self._lock:
            pending = self._pending
            self._pending = None
            self._timer = None
        if pending is None:
            return False

        if self.is_suppressed is not None and self.is_suppressed():
            self.suppressed_count += 1
            logger.debug("Debounced call suppressed")
            return False

        args, kwargs = pending
        self.fire_count += 1
        try:
            self.func(*args, **kwargs)
        except Exception as e:
            # Runs on the timer thread, where nothing else would see the error
            logger.error(f"Debounced call failed: {e}", exc_info=True)
            return False
        return True
