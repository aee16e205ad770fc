"""In-memory LRU cache with in-flight request coalescing.

One instance holds artwork bytes under a byte budget; others hold small
lookup results under an entry-count budget. Both share the same contract:
at most one outstanding computation per key, and the least recently used
entry goes first when the budget is exceeded.
"""

import asyncio
import threading
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from ..config import ARTWORK_CACHE_BYTES, COVER_CACHE_SIZE
from ..utils.logging import get_logger

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def _count_one(_value: object) -> int:
    return 1


class LRUCache(Generic[K, V]):
    """Bounded LRU map plus a table of in-flight computations."""

    def __init__(
        self,
        max_size: int,
        sizeof: Optional[Callable[[V], int]] = None,
        name: str = "cache",
    ):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.name = name
        self._sizeof = sizeof or _count_one
        self._entries: "OrderedDict[K, Tuple[V, int]]" = OrderedDict()
        self._in_flight: Dict[K, "asyncio.Task[V]"] = {}
        self._total_size = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def total_size(self) -> int:
        return self._total_size

    def keys(self) -> list:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries.keys())

    def get(self, key: K) -> Optional[V]:
        """Return a cached value and mark it most recently used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry[0]

    def set(self, key: K, value: V) -> None:
        """Insert or replace a value, evicting old entries over budget."""
        size = self._sizeof(value)
        with self._lock:
            self._in_flight.pop(key, None)
            old = self._entries.pop(key, None)
            if old is not None:
                self._total_size -= old[1]

            if size > self.max_size:
                logger.debug(f"{self.name}: value for {key!r} exceeds budget, not cached")
                return

            self._entries[key] = (value, size)
            self._total_size += size
            self._evict()

    def _evict(self) -> None:
        while self._total_size > self.max_size and self._entries:
            old_key, (_, old_size) = self._entries.popitem(last=False)
            self._total_size -= old_size
            logger.debug(f"{self.name}: evicted {old_key!r}")

    def discard(self, key: K) -> None:
        with self._lock:
            old = self._entries.pop(key, None)
            if old is not None:
                self._total_size -= old[1]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._total_size = 0

    def in_flight(self, key: K) -> bool:
        return key in self._in_flight

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value, or share one computation among all callers.

        The in-flight check and registration run without yielding to the
        event loop, so two callers can never both start ``compute`` for the
        same key. The marker is dropped exactly once, when the computation
        settles; only a success is stored.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(compute())
            self._in_flight[key] = task
            task.add_done_callback(lambda t, k=key: self._settle(k, t))

        # A cancelled caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    def _settle(self, key: K, task: "asyncio.Task[V]") -> None:
        with self._lock:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.debug(f"{self.name}: computation for {key!r} failed: {task.exception()}")
            return
        self.set(key, task.result())


def byte_cache(max_bytes: int = ARTWORK_CACHE_BYTES, name: str = "artwork") -> LRUCache:
    """LRU cache budgeted by the total length of its byte values."""
    return LRUCache(max_bytes, sizeof=len, name=name)


def count_cache(max_entries: int = COVER_CACHE_SIZE, name: str = "lookup") -> LRUCache:
    """LRU cache budgeted by number of entries."""
    return LRUCache(max_entries, name=name)
