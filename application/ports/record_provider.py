"""
Record Provider Interface (Port).

This module defines the abstract interface for the record transport/storage
substrate. The core consumes exactly two operations: fetching records that
match a filter set, routed to the local cache or the network, and publishing
a record. Implementations may use a Supabase-backed cache with an HTTP relay
gateway (see infrastructure/) or any other substrate.
"""
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from domain.models.record import RawRecord, RecordDraft


class CacheUsage(str, Enum):
    """Where a provider fetch is routed."""

    ONLY_CACHE = "only-cache"
    ONLY_NETWORK = "only-network"


class RecordFilter(BaseModel):
    """
    Filter set for a provider fetch.

    Empty lists mean "no constraint" on that dimension. ``identifiers``
    matches the records' 'd' identifier.
    """

    kinds: List[int] = Field(default_factory=list)
    authors: List[str] = Field(default_factory=list)
    identifiers: List[str] = Field(default_factory=list)
    since: Optional[int] = Field(default=None, description="Inclusive lower created_at bound")
    until: Optional[int] = Field(default=None, description="Inclusive upper created_at bound")
    limit: Optional[int] = Field(default=None, ge=1)

    model_config = {"frozen": True}

    def matches(self, record: RawRecord) -> bool:
        """True if a record satisfies every constraint except ``limit``."""
        if self.kinds and record.kind not in self.kinds:
            return False
        if self.authors and record.authority not in self.authors:
            return False
        if self.identifiers and record.d_tag not in self.identifiers:
            return False
        if self.since is not None and record.created_at < self.since:
            return False
        if self.until is not None and record.created_at > self.until:
            return False
        return True

    def with_limit(self, limit: Optional[int]) -> "RecordFilter":
        if limit is None:
            return self
        current = self.limit
        return self.model_copy(update={"limit": limit if current is None else min(current, limit)})


class RecordProvider(Protocol):
    """
    Abstract interface for the record transport/storage provider.

    Fetches are stateless from the caller's perspective. Transport failures
    must be raised (as application.exceptions.ProviderError), never reported
    as an empty list.
    """

    async def fetch_records(
        self,
        filters: Sequence[RecordFilter],
        cache_usage: CacheUsage,
        timeout_ms: int,
    ) -> List[RawRecord]:
        """
        Fetch records matching any of the filters.

        Args:
            filters: Filter set; a record matching any filter is returned
            cache_usage: Route to the local cache or to the network
            timeout_ms: Hard timeout for the fetch

        Returns:
            Matching raw records (possibly empty)
        """
        ...

    async def publish_record(self, draft: RecordDraft) -> None:
        """
        Sign and publish a record draft, persisting it locally as well.

        Args:
            draft: Unsigned record to publish
        """
        ...
