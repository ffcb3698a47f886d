"""
Timeout management utilities for page waits.
"""
import time
import logging
from typing import Any, Callable, Optional

from pricecheck.utils.errors import ElementNotInteractable

logger = logging.getLogger(__name__)


class TimeoutManager:
    """Tracks a single wait budget and polls conditions against it."""

    def __init__(self,
                 timeout_seconds: float = 10,
                 poll_interval_seconds: float = 0.25,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize timeout manager.

        Args:
            timeout_seconds: Maximum time a wait may block
            poll_interval_seconds: Delay between condition checks
            clock: Monotonic clock (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self.timeout_seconds = timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self.start_time: Optional[float] = None

    def start(self) -> None:
        """Start (or restart) the timer."""
        self.start_time = self._clock()

    def elapsed(self) -> float:
        """Get elapsed time since the timer started."""
        if self.start_time is None:
            return 0
        return self._clock() - self.start_time

    def remaining(self) -> float:
        return max(0.0, self.timeout_seconds - self.elapsed())

    def expired(self) -> bool:
        if self.start_time is None:
            return False
        return self.elapsed() >= self.timeout_seconds

    def poll_until(self, condition: Callable[[], Any], description: str = "condition") -> Optional[Any]:
        """
        Call ``condition`` until it returns something truthy or the budget runs out.

        Args:
            condition: Zero-argument callable checked each poll
            description: Name of what is being waited for (for logging)

        Returns:
            The first truthy value returned, or None on timeout
        """
        self.start()
        while True:
            try:
                result = condition()
                if result:
                    return result
            except ElementNotInteractable as e:
                # Transient page state counts as "not yet"
                logger.debug(f"Waiting for {description}: {e}")
            if self.expired():
                logger.debug(f"Timed out after {self.timeout_seconds}s waiting for {description}")
                return None
            self._sleep(min(self.poll_interval_seconds, max(self.remaining(), 0.0)))
