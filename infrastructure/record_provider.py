"""
Tiered implementation of the RecordProvider port.

Two tiers:
- cache: SupabaseRecordCacheRepository (local durable cache, sync client)
- network: HttpRelayClient (relay gateway, async)

``ONLY_CACHE`` reads the cache tier in a worker thread. ``ONLY_NETWORK``
reads the relay and writes what it returns through to the cache.
"""
import asyncio
import logging
from typing import List, Sequence

from application.exceptions import ProviderError
from application.ports.record_provider import CacheUsage, RecordFilter
from domain.models.record import RawRecord, RecordDraft
from infrastructure.db.record_cache_repository import SupabaseRecordCacheRepository
from infrastructure.relay.http_relay_client import HttpRelayClient

logger = logging.getLogger(__name__)


class NetworkDisabledError(ProviderError):
    """A network route was requested while network access is turned off."""

    pass


class TieredRecordProvider:
    """
    RecordProvider over a local cache tier and a network tier.

    Strategy decisions (fallback, merging) belong to the caller; this class
    only routes each call to one tier.
    """

    def __init__(
        self,
        cache: SupabaseRecordCacheRepository,
        relay: HttpRelayClient,
        network_enabled: bool = True,
    ):
        self._cache = cache
        self._relay = relay
        self._network_enabled = network_enabled

    @property
    def network_enabled(self) -> bool:
        return self._network_enabled

    async def fetch_records(
        self,
        filters: Sequence[RecordFilter],
        cache_usage: CacheUsage,
        timeout_ms: int,
    ) -> List[RawRecord]:
        filters = list(filters)
        if cache_usage is CacheUsage.ONLY_CACHE:
            return await asyncio.to_thread(self._cache.query_many, filters)

        if not self._network_enabled:
            raise NetworkDisabledError("Network access is disabled")

        records = await self._relay.query(filters, timeout_ms=timeout_ms)
        await self._write_through(records)
        return records

    async def publish_record(self, draft: RecordDraft) -> None:
        if not self._network_enabled:
            raise NetworkDisabledError("Cannot publish while network access is disabled")
        record = await self._relay.publish(draft)
        await self._write_through([record])

    async def _write_through(self, records: List[RawRecord]) -> None:
        if not records:
            return
        try:
            await asyncio.to_thread(self._cache.save_many, records)
        except ProviderError as e:
            # Network results are still valid when the cache write fails.
            logger.warning(f"Could not cache {len(records)} network records: {e}")
