"""
Infrastructure Layer for workout record resolution.

This package contains concrete implementations of the record provider port:
- db/: Supabase local record cache
- relay/: HTTP relay gateway client
- record_provider: the tiered provider combining both
"""

from infrastructure.db import RecordCacheError, SupabaseRecordCacheRepository
from infrastructure.record_provider import NetworkDisabledError, TieredRecordProvider
from infrastructure.relay import HttpRelayClient, RelayAPIError, RelayUnavailable

__all__ = [
    "TieredRecordProvider",
    "NetworkDisabledError",
    # Cache tier
    "SupabaseRecordCacheRepository",
    "RecordCacheError",
    # Network tier
    "HttpRelayClient",
    "RelayUnavailable",
    "RelayAPIError",
]
