"""
Unit tests for CacheStrategySelector.

Each strategy is checked against a fake provider that records which route
(cache or network) every fetch took.
"""

import pytest

from application.exceptions import ProviderError, ProviderTimeoutError
from application.ports import CacheUsage, RecordFilter
from application.services import CacheStrategy, CacheStrategySelector, merge_by_id
from tests.fakes import AUTHORITY_A, FakeRecordProvider, make_exercise_record

EXERCISES = RecordFilter(kinds=[33401], authors=[AUTHORITY_A])


class NetworkForbiddenProvider(FakeRecordProvider):
    """Fails the test if the network route is ever used."""

    async def fetch_records(self, filters, cache_usage, timeout_ms):
        if cache_usage is CacheUsage.ONLY_NETWORK:
            pytest.fail("network route must not be used")
        return await super().fetch_records(filters, cache_usage, timeout_ms)


@pytest.fixture
def cached_record():
    return make_exercise_record("squat", record_id="cached-squat")


@pytest.fixture
def network_record():
    return make_exercise_record("bench", record_id="network-bench")


@pytest.mark.unit
class TestStrategies:
    @pytest.mark.asyncio
    async def test_cache_only_empty_cache_never_touches_network(self):
        selector = CacheStrategySelector(NetworkForbiddenProvider())

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.CACHE_ONLY)

        assert records == []

    @pytest.mark.asyncio
    async def test_cache_first_serves_from_cache(self, provider, selector, cached_record, network_record):
        provider.seed_cache([cached_record])
        provider.seed_network([network_record])

        records = await selector.fetch([EXERCISES], strategy="cache-first")

        assert [r.id for r in records] == ["cached-squat"]
        assert provider.network_calls == 0

    @pytest.mark.asyncio
    async def test_cache_first_falls_back_to_network(self, provider, selector, network_record):
        provider.seed_network([network_record])

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.CACHE_FIRST)

        assert [r.id for r in records] == ["network-bench"]
        assert (provider.cache_calls, provider.network_calls) == (1, 1)

    @pytest.mark.asyncio
    async def test_default_strategy_is_cache_first(self, selector):
        assert selector.default_strategy is CacheStrategy.CACHE_FIRST

    @pytest.mark.asyncio
    async def test_network_only_bypasses_cache(self, provider, selector, cached_record, network_record):
        provider.seed_cache([cached_record])
        provider.seed_network([network_record])

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.NETWORK_ONLY)

        assert [r.id for r in records] == ["network-bench"]
        assert provider.cache_calls == 0

    @pytest.mark.asyncio
    async def test_parallel_merges_and_dedupes(self, provider, selector, cached_record, network_record):
        provider.seed_cache([cached_record])
        provider.seed_network([network_record, cached_record])

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.PARALLEL)

        assert sorted(r.id for r in records) == ["cached-squat", "network-bench"]
        assert (provider.cache_calls, provider.network_calls) == (1, 1)

    @pytest.mark.asyncio
    async def test_parallel_propagates_network_failure(self, provider, selector, cached_record):
        provider.seed_cache([cached_record])
        provider.network_available = False

        with pytest.raises(ProviderError):
            await selector.fetch([EXERCISES], strategy=CacheStrategy.PARALLEL)

    @pytest.mark.asyncio
    async def test_adaptive_offline_uses_cache_only(self):
        provider = NetworkForbiddenProvider()
        selector = CacheStrategySelector(provider, is_online=lambda: False)

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.ADAPTIVE)

        assert records == []

    @pytest.mark.asyncio
    async def test_adaptive_populated_cache_uses_cache(self, provider, selector, cached_record, network_record):
        provider.seed_cache([cached_record])
        provider.seed_network([network_record])

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.ADAPTIVE)

        assert [r.id for r in records] == ["cached-squat"]
        assert provider.network_calls == 0

    @pytest.mark.asyncio
    async def test_adaptive_empty_cache_goes_to_network(self, provider, selector, network_record):
        provider.seed_network([network_record])

        records = await selector.fetch([EXERCISES], strategy=CacheStrategy.ADAPTIVE)

        assert [r.id for r in records] == ["network-bench"]
        # One availability check, then straight to the network.
        assert (provider.cache_calls, provider.network_calls) == (1, 1)

    @pytest.mark.asyncio
    async def test_unknown_strategy_rejected(self, selector):
        with pytest.raises(ValueError):
            await selector.fetch([EXERCISES], strategy="eventually")


@pytest.mark.unit
class TestLimitsAndTimeouts:
    @pytest.mark.asyncio
    async def test_max_results_limits_filters_and_output(self, provider, selector):
        provider.seed_cache(
            [make_exercise_record(f"ex-{i}", created_at=1000 + i) for i in range(5)]
        )

        records = await selector.fetch([EXERCISES], max_results=2)

        assert len(records) == 2
        assert provider.calls[0].filters[0].limit == 2

    @pytest.mark.asyncio
    async def test_empty_filter_set_returns_empty(self, provider, selector):
        assert await selector.fetch([]) == []
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_timeout_raises_distinct_error(self, provider, selector):
        provider.delays[CacheUsage.ONLY_NETWORK] = 0.5

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await selector.fetch([EXERCISES], strategy=CacheStrategy.NETWORK_ONLY, timeout_ms=50)

        assert exc_info.value.timeout_ms == 50
        assert exc_info.value.strategy == "network-only"

    @pytest.mark.asyncio
    async def test_timeout_is_passed_to_provider(self, provider, selector):
        await selector.fetch([EXERCISES], strategy=CacheStrategy.CACHE_ONLY, timeout_ms=1234)
        assert provider.calls[0].timeout_ms == 1234

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, provider, selector):
        provider.failures[CacheUsage.ONLY_CACHE] = ProviderError("disk gone")

        with pytest.raises(ProviderError, match="disk gone"):
            await selector.fetch([EXERCISES], strategy=CacheStrategy.CACHE_ONLY)


@pytest.mark.unit
class TestCheckAvailability:
    @pytest.mark.asyncio
    async def test_reports_count(self, provider, selector, cached_record):
        provider.seed_cache([cached_record])

        availability = await selector.check_availability([EXERCISES])

        assert availability.available is True
        assert availability.count == 1
        assert provider.network_calls == 0

    @pytest.mark.asyncio
    async def test_timeout_reports_unavailable(self, provider, selector):
        provider.delays[CacheUsage.ONLY_CACHE] = 1.0

        availability = await selector.check_availability([EXERCISES])

        assert availability.available is False
        assert availability.count == 0

    @pytest.mark.asyncio
    async def test_provider_error_reports_unavailable(self, provider, selector):
        provider.failures[CacheUsage.ONLY_CACHE] = ProviderError("locked")

        availability = await selector.check_availability([EXERCISES])

        assert availability.available is False


@pytest.mark.unit
def test_merge_by_id_keeps_first_occurrence():
    a = make_exercise_record("squat", record_id="same")
    b = make_exercise_record("squat-newer", record_id="same")
    c = make_exercise_record("bench", record_id="other")

    merged = merge_by_id([a], [b, c])

    assert merged == [a, c]
