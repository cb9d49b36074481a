"""Tests for the decoded image cache and its configurable factory."""
from __future__ import annotations

import threading

import pytest
from PIL import Image

from snapframe.cache import (
    DecodedImageCache,
    configure_cache,
    content_key,
    get_cache,
    override_cache,
)


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Ensure each test starts with the default cache factory."""

    configure_cache(DecodedImageCache)
    yield
    configure_cache(DecodedImageCache)


def _image(size: int = 4) -> Image.Image:
    return Image.new("RGBA", (size, size))


def test_content_key_is_stable_digest() -> None:
    assert content_key(b"abc") == content_key(b"abc")
    assert content_key(b"abc") != content_key(b"abd")
    assert len(content_key(b"")) == 64


def test_configure_cache_allows_custom_factory() -> None:
    """A custom factory should be invoked lazily and configure cache limits."""

    configure_cache(lambda: DecodedImageCache(max_size=1))
    cache = get_cache()
    assert isinstance(cache, DecodedImageCache)
    assert cache.max_size == 1
    assert get_cache() is cache


def test_configure_cache_rejects_non_callable() -> None:
    with pytest.raises(TypeError):
        configure_cache("not a factory")  # type: ignore[arg-type]


def test_override_cache_temporarily_swaps_instance() -> None:
    """The override context should swap caches and restore the prior instance."""

    original = get_cache()
    replacement = DecodedImageCache(max_size=2)
    with override_cache(replacement) as cache:
        assert cache is replacement
        assert get_cache() is replacement
    assert get_cache() is original


def test_lru_eviction_order() -> None:
    cache = DecodedImageCache(max_size=2, cleanup_threshold=1.0)
    cache.put("a", _image())
    cache.put("b", _image())
    cache.get("a")
    cache.put("c", _image())
    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache


def test_byte_budget_evicts_oldest_entries() -> None:
    cache = DecodedImageCache(max_size=10, max_bytes=4 * 4 * 4 * 2, cleanup_threshold=1.0)
    cache.put("a", _image())
    cache.put("b", _image())
    cache.put("c", _image())
    assert len(cache) == 2
    assert "a" not in cache
    assert cache.nbytes == 128


def test_oversized_image_is_not_cached() -> None:
    cache = DecodedImageCache(max_bytes=10)
    cache.put("big", _image())
    assert len(cache) == 0


def test_replacing_key_keeps_byte_count_consistent() -> None:
    cache = DecodedImageCache()
    cache.put("a", _image(4), {"v": 1})
    cache.put("a", _image(2), {"v": 2})
    assert len(cache) == 1
    assert cache.nbytes == 2 * 2 * 4
    assert cache.get("a").metadata == {"v": 2}


def test_concurrent_puts_are_safe() -> None:
    cache = DecodedImageCache(max_size=8, cleanup_threshold=1.0)

    def worker(offset: int) -> None:
        for index in range(50):
            cache.put(f"{offset}-{index}", _image(1))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(cache) <= 8
    assert cache.nbytes == len(cache) * 4
