# workers.py
"""
Background task execution for rendering and export.

A :class:`RenderQueue` runs raster jobs on a single worker thread, so two
jobs never touch a raster at the same time.  Jobs are tagged with a target
key; submitting a new job for a target supersedes the previous one when it
has not started yet.  A job that is already running always completes.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import RLock
from typing import Any, Callable, Dict, Optional


class RenderQueue:
    """Serialised executor for render and encode jobs."""

    def __init__(self, name: str = "snapframe-render") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._latest: Dict[str, Future] = {}
        self._lock = RLock()
        self._log = logging.getLogger(__name__)

    def submit(self, target: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        """Schedule ``fn(*args, **kwargs)`` as the newest job for ``target``."""
        with self._lock:
            previous = self._latest.get(target)
            if previous is not None and previous.cancel():
                self._log.debug("Superseded pending job for %s", target)
            future = self._executor.submit(self._run, target, fn, *args, **kwargs)
            self._latest[target] = future
        future.add_done_callback(lambda done: self._forget(target, done))
        return future

    def _run(self, target: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            self._log.error("Job for %s failed: %s", target, e)
            raise

    def _forget(self, target: str, future: Future) -> None:
        with self._lock:
            if self._latest.get(target) is future:
                del self._latest[target]

    def pending(self, target: str) -> Optional[Future]:
        """Return the newest unfinished job for ``target``, if any."""
        with self._lock:
            return self._latest.get(target)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def __enter__(self) -> "RenderQueue":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
