"""
Bounded, thread-safe memo cache for parsed records.

Keyed by record id; records are immutable so entries never go stale. A hit
moves the entry to the most-recent end (re-insertion), so the entry evicted
at capacity is the one inserted or touched longest ago.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CAPACITY = 1000


@dataclass
class ParseCacheStats:
    """Snapshot of cache counters."""

    hits: int
    misses: int
    evictions: int
    size: int
    capacity: int
    total_parse_ms: float

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.requests if self.requests else 0.0


class ParseCache:
    """
    LRU memo cache with hit/miss counters.

    Each resolver owns its own instance; there is no process-wide cache.

    Examples:
        >>> cache = ParseCache(capacity=2)
        >>> cache.get_or_parse("a", lambda: 1)
        1
        >>> cache.get_or_parse("a", lambda: 2)
        1
        >>> cache.stats().hits
        1
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("ParseCache capacity must be at least 1")
        self._capacity = capacity
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._total_parse_ms = 0.0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def get_or_parse(self, key: Hashable, parse_fn: Callable[[], T]) -> T:
        """
        Return the cached result for ``key`` or compute, store and return it.

        ``None`` results are cached too: a record that failed validation
        stays failed.
        """
        with self._lock:
            if key in self._entries:
                self._hits += 1
                self._entries.move_to_end(key)
                logger.debug(f"Parse cache hit for {key}")
                return self._entries[key]

            self._misses += 1
            started = time.perf_counter()
            result = parse_fn()
            self._total_parse_ms += (time.perf_counter() - started) * 1000

            if len(self._entries) >= self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Parse cache evicted {evicted}")
            self._entries[key] = result
            return result

    def clear(self) -> None:
        """Drop all entries; counters are kept."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.info(f"Parse cache cleared ({removed} entries removed)")

    def stats(self) -> ParseCacheStats:
        with self._lock:
            return ParseCacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                size=len(self._entries),
                capacity=self._capacity,
                total_parse_ms=self._total_parse_ms,
            )
