"""
Fake Record Provider for testing.

This module provides an in-memory implementation of RecordProvider with
separate cache and network stores, so strategy and resolution tests can see
exactly which route each fetch took.
"""
import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from application.exceptions import ProviderError
from application.ports.record_provider import CacheUsage, RecordFilter
from domain.models.record import RawRecord, RecordDraft


@dataclass
class FetchCall:
    """One recorded fetch_records call."""

    filters: List[RecordFilter]
    cache_usage: CacheUsage
    timeout_ms: int


class FakeRecordProvider:
    """
    In-memory fake implementation of RecordProvider for testing.

    Usage:
        provider = FakeRecordProvider()
        provider.seed_network([record])
        provider.network_available = False   # network fetches now raise
        provider.delays[CacheUsage.ONLY_NETWORK] = 0.5
        provider.failures[CacheUsage.ONLY_CACHE] = ProviderError("boom")
    """

    def __init__(self):
        """Initialize with empty storage."""
        self._cache: Dict[str, RawRecord] = {}
        self._network: Dict[str, RawRecord] = {}
        self.calls: List[FetchCall] = []
        self.published: List[RecordDraft] = []
        self.network_available = True
        self.delays: Dict[CacheUsage, float] = {}
        self.failures: Dict[CacheUsage, Exception] = {}

    def reset(self) -> None:
        """Clear stores, recorded calls and injected behavior."""
        self._cache.clear()
        self._network.clear()
        self.calls.clear()
        self.published.clear()
        self.network_available = True
        self.delays.clear()
        self.failures.clear()

    def seed_cache(self, records: Sequence[RawRecord]) -> None:
        for record in records:
            self._cache[record.id] = record

    def seed_network(self, records: Sequence[RawRecord]) -> None:
        for record in records:
            self._network[record.id] = record

    def seed(self, records: Sequence[RawRecord]) -> None:
        """Seed both the cache and the network."""
        self.seed_cache(records)
        self.seed_network(records)

    def calls_for(self, usage: CacheUsage) -> List[FetchCall]:
        return [call for call in self.calls if call.cache_usage is usage]

    @property
    def cache_calls(self) -> int:
        return len(self.calls_for(CacheUsage.ONLY_CACHE))

    @property
    def network_calls(self) -> int:
        return len(self.calls_for(CacheUsage.ONLY_NETWORK))

    # =========================================================================
    # RecordProvider Protocol Methods
    # =========================================================================

    async def fetch_records(
        self,
        filters: Sequence[RecordFilter],
        cache_usage: CacheUsage,
        timeout_ms: int,
    ) -> List[RawRecord]:
        self.calls.append(FetchCall(list(filters), cache_usage, timeout_ms))

        delay = self.delays.get(cache_usage)
        if delay:
            await asyncio.sleep(delay)
        failure = self.failures.get(cache_usage)
        if failure is not None:
            raise failure
        if cache_usage is CacheUsage.ONLY_NETWORK and not self.network_available:
            raise ProviderError("Network unavailable")

        store = self._cache if cache_usage is CacheUsage.ONLY_CACHE else self._network
        results: List[RawRecord] = []
        seen = set()
        for record_filter in filters:
            matched = sorted(
                (r for r in store.values() if record_filter.matches(r)),
                key=lambda r: r.created_at,
                reverse=True,
            )
            if record_filter.limit is not None:
                matched = matched[: record_filter.limit]
            for record in matched:
                if record.id not in seen:
                    seen.add(record.id)
                    results.append(record)
        return results

    async def publish_record(self, draft: RecordDraft) -> None:
        self.published.append(draft)
        record = RawRecord(
            id=f"published-{len(self.published)}",
            kind=draft.kind,
            authority=draft.authority,
            identifier=draft.identifier,
            content=draft.content,
            tags=draft.tags,
            created_at=draft.created_at,
        )
        self._network[record.id] = record
        self._cache[record.id] = record

    @property
    def last_published(self) -> Optional[RecordDraft]:
        return self.published[-1] if self.published else None
