from unittest.mock import patch

import psutil
from PIL import Image

from snapframe.cache import DecodedImageCache, override_cache
from snapframe.managers.performance import MemoryMonitor


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _filled_cache() -> DecodedImageCache:
    cache = DecodedImageCache(max_size=4, cleanup_threshold=1.0)
    for key in "abcd":
        cache.put(key, Image.new("RGBA", (2, 2)))
    return cache


def test_high_memory_triggers_cache_cleanup():
    monitor = MemoryMonitor(threshold_bytes=100, interval_secs=60, clock=FakeClock())
    with override_cache(_filled_cache()) as cache, patch.object(
        MemoryMonitor, "resident_bytes", return_value=10**12
    ):
        assert monitor.check_memory() is True
    assert len(cache) == 2


def test_cleanup_is_rate_limited():
    clock = FakeClock()
    monitor = MemoryMonitor(threshold_bytes=100, interval_secs=60, clock=clock)
    with override_cache(_filled_cache()), patch.object(
        MemoryMonitor, "resident_bytes", return_value=10**12
    ):
        assert monitor.check_memory() is True
        clock.now += 30
        assert monitor.check_memory() is False
        clock.now += 31
        assert monitor.check_memory() is True


def test_low_memory_does_nothing():
    monitor = MemoryMonitor(threshold_bytes=10**15)
    with override_cache(_filled_cache()) as cache:
        assert monitor.check_memory() is False
    assert len(cache) == 4


def test_failed_memory_probe_is_logged(caplog):
    monitor = MemoryMonitor(threshold_bytes=0)
    with patch.object(MemoryMonitor, "resident_bytes", side_effect=psutil.AccessDenied()):
        assert monitor.check_memory() is False
    assert "Memory check failed" in caplog.text
