"""
Application services shared by the use cases.

- parse_cache: bounded LRU memo cache for parsed records
- record_parser: memoizing front for the domain record parsers
- cache_strategy: cache-only / cache-first / parallel / network-only / adaptive reads
"""

from application.services.cache_strategy import (
    Availability,
    CacheStrategy,
    CacheStrategySelector,
    merge_by_id,
)
from application.services.parse_cache import ParseCache, ParseCacheStats
from application.services.record_parser import RecordParser

__all__ = [
    "ParseCache",
    "ParseCacheStats",
    "RecordParser",
    "CacheStrategy",
    "CacheStrategySelector",
    "Availability",
    "merge_by_id",
]
