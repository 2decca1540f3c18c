"""
Infrastructure Database Layer.

This package provides the Supabase-backed local record cache used by the
tiered record provider.

Usage:
    from supabase import create_client
    from infrastructure.db import SupabaseRecordCacheRepository

    # Create Supabase client
    client = create_client(SUPABASE_URL, SUPABASE_KEY)

    # Instantiate repository with injected client
    cache_repo = SupabaseRecordCacheRepository(client, table="records")
"""

from infrastructure.db.record_cache_repository import (
    RecordCacheError,
    SupabaseRecordCacheRepository,
)

__all__ = [
    "SupabaseRecordCacheRepository",
    "RecordCacheError",
]
