# managers/performance.py
"""
MemoryMonitor: checks process memory and trims the decoded image cache when
a threshold is exceeded.
"""
import gc
import logging
import time
from typing import Callable, Optional

import psutil

from .. import config
from ..cache import get_cache


class MemoryMonitor:
    """Polled memory check with a minimum interval between cleanups."""

    def __init__(
        self,
        threshold_bytes: int = config.MEMORY_THRESHOLD_BYTES,
        interval_secs: float = config.MEMORY_CLEANUP_INTERVAL_SECS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.threshold_bytes = threshold_bytes
        self.interval_secs = interval_secs
        self._clock = clock
        self.last_cleanup: Optional[float] = None

    def resident_bytes(self) -> int:
        return psutil.Process().memory_info().rss

    def check_memory(self) -> bool:
        """Run a cleanup if memory is over threshold; return whether one ran."""
        try:
            mem = self.resident_bytes()
        except psutil.Error as e:
            logging.warning("Memory check failed: %s", e)
            return False
        if mem <= self.threshold_bytes:
            return False

        now = self._clock()
        if self.last_cleanup is not None and now - self.last_cleanup < self.interval_secs:
            return False
        self._optimize()
        self.last_cleanup = now
        return True

    def _optimize(self) -> None:
        get_cache().cleanup()
        gc.collect()
        logging.info("MemoryMonitor: memory optimization executed")


_monitor: Optional[MemoryMonitor] = None


def get_monitor() -> MemoryMonitor:
    global _monitor
    if _monitor is None:
        _monitor = MemoryMonitor()
    return _monitor
