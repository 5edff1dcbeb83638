"""
Fixed-delay pacing between consecutive lookups of a batch run.

Nominatim's usage policy allows at most one request per second; the
batch sleeps a configured delay between records to stay under it.
"""

from __future__ import annotations

import time
import logging
from typing import Callable

from .base import Throttle

logger = logging.getLogger(__name__)


class ThrottleScheduler(Throttle):
    """
    Sleeps a fixed delay between records, never after the last one.

    This is pacing only; failed requests are not retried or backed off.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        """
        Initialize scheduler.

        Args:
            sleep: Blocking sleep taking seconds (injectable for tests)
        """
        self._sleep = sleep
        self.waits = 0

    def wait_between(self, is_last: bool, delay_micros: int) -> None:
        if delay_micros <= 0 or is_last:
            return
        seconds = delay_micros / 1_000_000
        logger.debug(f"Throttling for {seconds:.3f}s")
        self._sleep(seconds)
        self.waits += 1
