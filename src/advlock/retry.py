"""
Bounded polling for lock acquisition.

Waits are plain sleeps between non-blocking attempts. Very long delays
(over five minutes) are rounded down to whole seconds.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

# Above this many seconds, sleep in whole seconds
LONG_WAIT_THRESHOLD = 300


def wait(seconds: float) -> None:
    """Sleep between two lock attempts."""
    if seconds > LONG_WAIT_THRESHOLD:
        time.sleep(int(seconds))
    else:
        time.sleep(seconds)


def poll(attempt: Callable[[], bool], max_attempts: int, delay: float) -> bool:
    """
    Call `attempt` until it returns True, at most `max_attempts` times.

    Usage:
        poll(lambda: lock.try_lock(False), max_attempts=3, delay=0.1)
    """
    for n in range(1, max_attempts + 1):
        if attempt():
            return True
        if n < max_attempts:
            logger.debug("Attempt %d/%d failed, waiting %.4fs", n, max_attempts, delay)
            wait(delay)
    return False
