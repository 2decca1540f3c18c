"""
Shared pytest fixtures for the record resolution tests.
"""

import pytest

from application.services import CacheStrategySelector, ParseCache, RecordParser
from application.use_cases import ReferenceResolver
from tests.fakes import FakeRecordProvider


@pytest.fixture
def provider() -> FakeRecordProvider:
    """Fresh in-memory record provider."""
    return FakeRecordProvider()


@pytest.fixture
def selector(provider) -> CacheStrategySelector:
    """Strategy selector over the fake provider (cache-first, short timeouts)."""
    return CacheStrategySelector(provider, timeout_ms=2000, check_timeout_ms=200)


@pytest.fixture
def parse_cache() -> ParseCache:
    return ParseCache(capacity=100)


@pytest.fixture
def resolver(selector, parse_cache) -> ReferenceResolver:
    """Resolver with its own parse cache."""
    return ReferenceResolver(selector, parser=RecordParser(parse_cache))
