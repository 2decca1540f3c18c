"""
Cache strategy selection over the record provider.

Every strategy is composed from the provider's two routes,
``CacheUsage.ONLY_CACHE`` and ``CacheUsage.ONLY_NETWORK``:

- cache-only: local durable cache exclusively; never touches the network
- cache-first: cache, falling back to the network when the cache is empty
- parallel: both routes concurrently, merged and deduplicated by record id
- network-only: bypass the cache
- adaptive: cache-only when offline; otherwise check the cache with a short
  timeout and pick cache-first if it is populated, else network-only

All strategies run under a hard timeout. A timeout raises
ProviderTimeoutError, which is never confused with an empty result.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

from application.exceptions import ProviderError, ProviderTimeoutError
from application.ports.record_provider import CacheUsage, RecordFilter, RecordProvider
from domain.models.record import RawRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10000
DEFAULT_CHECK_TIMEOUT_MS = 1000


class CacheStrategy(str, Enum):
    """Read strategies; a small closed set."""

    CACHE_ONLY = "cache-only"
    CACHE_FIRST = "cache-first"
    PARALLEL = "parallel"
    NETWORK_ONLY = "network-only"
    ADAPTIVE = "adaptive"


@dataclass
class Availability:
    """Result of an advisory cache availability check."""

    available: bool
    count: int = 0


def merge_by_id(*batches: Sequence[RawRecord]) -> List[RawRecord]:
    """Concatenate batches, keeping the first occurrence of each record id."""
    seen = set()
    merged: List[RawRecord] = []
    for batch in batches:
        for record in batch:
            if record.id in seen:
                continue
            seen.add(record.id)
            merged.append(record)
    return merged


class CacheStrategySelector:
    """
    Fetches records using one of the cache strategies.

    Holds no connections of its own; each fetch is stateless from the
    caller's point of view.
    """

    def __init__(
        self,
        provider: RecordProvider,
        default_strategy: Union[CacheStrategy, str] = CacheStrategy.CACHE_FIRST,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        check_timeout_ms: int = DEFAULT_CHECK_TIMEOUT_MS,
        is_online: Optional[Callable[[], bool]] = None,
    ):
        """
        Args:
            provider: Record transport/storage provider
            default_strategy: Strategy used when a fetch names none
            timeout_ms: Default hard timeout per fetch
            check_timeout_ms: Timeout for availability checks
            is_online: Connectivity check consulted by the adaptive strategy;
                assumed online when omitted
        """
        self._provider = provider
        self._default_strategy = CacheStrategy(default_strategy)
        self._timeout_ms = timeout_ms
        self._check_timeout_ms = check_timeout_ms
        self._is_online = is_online or (lambda: True)

    @property
    def default_strategy(self) -> CacheStrategy:
        return self._default_strategy

    async def fetch(
        self,
        filters: Sequence[RecordFilter],
        strategy: Optional[Union[CacheStrategy, str]] = None,
        max_results: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[RawRecord]:
        """
        Fetch records matching any of the filters.

        Args:
            filters: Filter set passed through to the provider
            strategy: Read strategy; the selector default when None
            max_results: Upper bound on returned records
            timeout_ms: Hard timeout; the selector default when None

        Returns:
            Matching records; empty when nothing matched

        Raises:
            ProviderTimeoutError: If the strategy did not finish in time
            ProviderError: If the provider failed
        """
        chosen = CacheStrategy(strategy) if strategy is not None else self._default_strategy
        timeout = timeout_ms if timeout_ms is not None else self._timeout_ms
        filters = [f.with_limit(max_results) for f in filters]
        if not filters:
            return []

        started = time.perf_counter()
        try:
            records = await asyncio.wait_for(
                self._run(chosen, filters, timeout), timeout=timeout / 1000
            )
        except asyncio.TimeoutError:
            logger.warning(f"Fetch using {chosen.value} timed out after {timeout}ms")
            raise ProviderTimeoutError(timeout, chosen.value) from None

        if max_results is not None:
            records = records[:max_results]
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Fetched {len(records)} records using {chosen.value} in {elapsed_ms:.1f}ms")
        return records

    async def check_availability(self, filters: Sequence[RecordFilter]) -> Availability:
        """
        Check the local cache for records matching the filters.

        Advisory: provider failures and timeouts report ``available=False``
        instead of raising.
        """
        try:
            records = await self.fetch(
                filters,
                strategy=CacheStrategy.CACHE_ONLY,
                timeout_ms=self._check_timeout_ms,
            )
        except ProviderError as e:
            logger.info(f"Cache availability check failed: {e}")
            return Availability(available=False, count=0)
        return Availability(available=bool(records), count=len(records))

    async def _run(
        self, strategy: CacheStrategy, filters: List[RecordFilter], timeout_ms: int
    ) -> List[RawRecord]:
        if strategy is CacheStrategy.CACHE_ONLY:
            return await self._query(filters, CacheUsage.ONLY_CACHE, timeout_ms)

        if strategy is CacheStrategy.NETWORK_ONLY:
            return await self._query(filters, CacheUsage.ONLY_NETWORK, timeout_ms)

        if strategy is CacheStrategy.CACHE_FIRST:
            cached = await self._query(filters, CacheUsage.ONLY_CACHE, timeout_ms)
            if cached:
                return cached
            logger.debug("Cache empty, falling back to network")
            return await self._query(filters, CacheUsage.ONLY_NETWORK, timeout_ms)

        if strategy is CacheStrategy.PARALLEL:
            cached, fresh = await asyncio.gather(
                self._query(filters, CacheUsage.ONLY_CACHE, timeout_ms),
                self._query(filters, CacheUsage.ONLY_NETWORK, timeout_ms),
            )
            return merge_by_id(cached, fresh)

        # adaptive
        if not self._is_online():
            logger.debug("Offline, adaptive fetch served from cache only")
            return await self._run(CacheStrategy.CACHE_ONLY, filters, timeout_ms)
        availability = await self.check_availability(filters)
        resolved = CacheStrategy.CACHE_FIRST if availability.available else CacheStrategy.NETWORK_ONLY
        logger.debug(f"Adaptive fetch chose {resolved.value} (cached={availability.count})")
        return await self._run(resolved, filters, timeout_ms)

    async def _query(
        self, filters: List[RecordFilter], usage: CacheUsage, timeout_ms: int
    ) -> List[RawRecord]:
        return list(await self._provider.fetch_records(filters, usage, timeout_ms))
