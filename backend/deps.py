"""
Dependency providers for the record resolution core.

Builds the object graph from settings. Providers return interface types
(Protocols) where one exists so callers can swap in fakes.

Architecture:
- Settings and the Supabase client are cached per-process (lru_cache)
- The record provider and strategy selector are stateless and cached
- Resolvers and use cases are created per call; each resolver owns its
  own parse cache

Usage:
    from backend.deps import get_reference_resolver

    resolver = get_reference_resolver()
    resolution = await resolver.resolve_templates(refs)

Testing:
    # Bypass the providers and inject a fake
    selector = get_strategy_selector(provider=FakeRecordProvider())
"""

from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

# Protocol types (interfaces)
from application.ports import RecordProvider

# Application services and use cases
from application.services import CacheStrategySelector, ParseCache, RecordParser
from application.use_cases import (
    LibraryCollectionUseCase,
    RecordSearchUseCase,
    ReferenceResolver,
    TemplateManagementUseCase,
    WorkoutHistoryUseCase,
)

# Concrete implementations
from infrastructure import HttpRelayClient, SupabaseRecordCacheRepository, TieredRecordProvider

from backend.settings import Settings, get_settings as _get_settings


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Returns:
        Client: Supabase client instance, or None if not configured
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        RuntimeError: If Supabase credentials are not configured
    """
    client = get_supabase_client()
    if client is None:
        raise RuntimeError("Record cache not available. Supabase credentials not configured.")
    return client


# =============================================================================
# Provider Wiring
# =============================================================================


@lru_cache
def get_record_provider() -> RecordProvider:
    """
    Get the tiered record provider (Supabase cache + relay gateway).

    Returns:
        RecordProvider: Provider for fetching and publishing records
    """
    settings = _get_settings()
    cache = SupabaseRecordCacheRepository(
        get_supabase_client_required(), table=settings.records_table
    )
    relay = HttpRelayClient(
        base_url=settings.relay_gateway_url,
        timeout=settings.fetch_timeout_ms / 1000,
        publish_max_attempts=settings.relay_publish_max_attempts,
    )
    return TieredRecordProvider(cache, relay, network_enabled=settings.network_enabled)


def get_strategy_selector(provider: Optional[RecordProvider] = None) -> CacheStrategySelector:
    """
    Get a cache strategy selector configured from settings.

    Args:
        provider: Record provider; the tiered provider when None
    """
    settings = _get_settings()
    return CacheStrategySelector(
        provider or get_record_provider(),
        default_strategy=settings.default_cache_strategy,
        timeout_ms=settings.fetch_timeout_ms,
        check_timeout_ms=settings.availability_check_timeout_ms,
        is_online=lambda: _get_settings().network_enabled,
    )


# =============================================================================
# Use Case Providers
# =============================================================================


def get_reference_resolver(
    selector: Optional[CacheStrategySelector] = None,
) -> ReferenceResolver:
    """
    Get a new ReferenceResolver with its own parse cache.

    Args:
        selector: Strategy selector; built from settings when None
    """
    settings = _get_settings()
    parser = RecordParser(ParseCache(capacity=settings.parse_cache_capacity))
    return ReferenceResolver(selector or get_strategy_selector(), parser=parser)


def get_library_use_case(
    provider: Optional[RecordProvider] = None,
) -> LibraryCollectionUseCase:
    """Get a LibraryCollectionUseCase wired to one selector and resolver."""
    provider = provider or get_record_provider()
    selector = get_strategy_selector(provider)
    return LibraryCollectionUseCase(
        provider=provider,
        resolver=get_reference_resolver(selector),
        selector=selector,
    )


def get_workout_history_use_case(
    provider: Optional[RecordProvider] = None,
) -> WorkoutHistoryUseCase:
    """Get a WorkoutHistoryUseCase wired to one selector and resolver."""
    provider = provider or get_record_provider()
    selector = get_strategy_selector(provider)
    return WorkoutHistoryUseCase(
        provider=provider,
        selector=selector,
        resolver=get_reference_resolver(selector),
    )


def get_template_management_use_case(
    provider: Optional[RecordProvider] = None,
) -> TemplateManagementUseCase:
    """Get a TemplateManagementUseCase publishing through the record provider."""
    return TemplateManagementUseCase(provider=provider or get_record_provider())


def get_search_use_case(
    provider: Optional[RecordProvider] = None,
) -> RecordSearchUseCase:
    """Get a RecordSearchUseCase sharing one selector with its resolver's parser."""
    selector = get_strategy_selector(provider or get_record_provider())
    return RecordSearchUseCase(
        selector=selector,
        parser=get_reference_resolver(selector).parser,
    )
