"""Thread-safe LRU cache of decoded images.

Decoding is the most expensive step of ingestion, and the same file is
often placed into several collage cells or reloaded after an undo.  Entries
are keyed by a digest of the encoded bytes and evicted least-recently-used
first, bounded both by entry count and by decoded pixel memory.

The active cache is created lazily through a swappable factory so tests
and workers can substitute their own instance without touching globals.
"""

from __future__ import annotations

import hashlib
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Iterator, Optional

from PIL import Image

from . import config


def content_key(data: bytes) -> str:
    """Return the cache key for encoded image ``data``."""
    return hashlib.sha256(data).hexdigest()


def image_nbytes(image: Image.Image) -> int:
    return image.width * image.height * len(image.getbands())


@dataclass(slots=True)
class CachedImage:
    image: Image.Image
    metadata: dict = field(default_factory=dict)

    @property
    def nbytes(self) -> int:
        return image_nbytes(self.image)


class DecodedImageCache:
    """LRU cache bounded by entry count and decoded byte size."""

    def __init__(
        self,
        max_size: int = config.MAX_CACHE_SIZE,
        max_bytes: int = config.MAX_CACHE_BYTES,
        cleanup_threshold: float = config.CACHE_CLEANUP_THRESHOLD,
    ) -> None:
        self.max_size = max_size
        self.max_bytes = max_bytes
        self.cleanup_threshold = cleanup_threshold
        self._entries: "OrderedDict[str, CachedImage]" = OrderedDict()
        self._nbytes = 0
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def nbytes(self) -> int:
        return self._nbytes

    def get(self, key: str) -> Optional[CachedImage]:
        """Return the entry for ``key`` and mark it most recently used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(self, key: str, image: Image.Image, metadata: Optional[dict] = None) -> None:
        """Insert ``image`` under ``key``, evicting old entries when over budget.

        Images larger than the whole byte budget are not cached.
        """
        entry = CachedImage(image, dict(metadata or {}))
        if entry.nbytes > self.max_bytes:
            return
        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._nbytes -= previous.nbytes
            elif len(self._entries) >= self.max_size * self.cleanup_threshold:
                self._evict(max(self.max_size // 2, 1))
            self._entries[key] = entry
            self._nbytes += entry.nbytes
            while self._nbytes > self.max_bytes and len(self._entries) > 1:
                self._pop_oldest()

    def _pop_oldest(self) -> None:
        _, entry = self._entries.popitem(last=False)
        self._nbytes -= entry.nbytes

    def _evict(self, target: int) -> None:
        while len(self._entries) > target:
            self._pop_oldest()

    def cleanup(self) -> None:
        """Evict least-recently-used entries down to half capacity."""
        with self._lock:
            self._evict(max(self.max_size // 2, 1))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._nbytes = 0


_cache_factory: Callable[[], DecodedImageCache] = DecodedImageCache
_cache_instance: Optional[DecodedImageCache] = None
_cache_factory_lock = RLock()


def configure_cache(factory: Callable[[], DecodedImageCache], *, reset: bool = True) -> None:
    """Set the factory used to lazily build the active cache.

    With ``reset`` (the default) the current instance is dropped so the next
    :func:`get_cache` call builds a fresh one from ``factory``.
    """
    if not callable(factory):
        raise TypeError("factory must be callable")

    global _cache_factory, _cache_instance
    with _cache_factory_lock:
        _cache_factory = factory
        if reset:
            _cache_instance = None


def get_cache() -> DecodedImageCache:
    """Return the lazily constructed cache instance."""
    global _cache_instance
    with _cache_factory_lock:
        if _cache_instance is None:
            _cache_instance = _cache_factory()
        return _cache_instance


@contextmanager
def override_cache(cache: DecodedImageCache) -> Iterator[DecodedImageCache]:
    """Use ``cache`` as the active cache for the duration of a ``with`` block."""
    global _cache_factory, _cache_instance
    with _cache_factory_lock:
        previous = (_cache_factory, _cache_instance)
        _cache_factory = lambda: cache  # noqa: E731
        _cache_instance = cache
    try:
        yield cache
    finally:
        with _cache_factory_lock:
            _cache_factory, _cache_instance = previous


__all__ = [
    "CachedImage",
    "DecodedImageCache",
    "configure_cache",
    "content_key",
    "get_cache",
    "image_nbytes",
    "override_cache",
]
