"""
HTTP utilities for aawire.
"""
import time
import logging
from typing import Callable

# Configure logging
logger = logging.getLogger(__name__)

# Pacing configuration
REQUEST_DELAY = 0.3  # seconds paused between calls to the API
REQUEST_TIMEOUT = 60  # seconds


class RateLimiter:
    """
    Fixed-interval gate that keeps the crawler from hammering the API.

    Every call to ``acquire`` pauses for the same amount of time, regardless
    of how long ago the previous request was made.
    """
    def __init__(self, delay: float = REQUEST_DELAY, sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the RateLimiter.

        Args:
            delay: Seconds to pause on each acquire; 0 disables pausing
            sleep: Function used to pause, replaceable in tests
        """
        self.delay = delay
        self._sleep = sleep

    def acquire(self):
        """Pause for the configured delay."""
        if self.delay <= 0:
            return
        logger.debug(f"Pausing {self.delay:.2f}s before the next request")
        self._sleep(self.delay)
