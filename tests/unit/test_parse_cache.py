"""
Unit tests for the parse cache and the memoizing record parser.
"""

import threading

import pytest

from application.services import ParseCache, RecordParser
from domain.exceptions import UnsupportedRecordKindError
from domain.models import Exercise
from domain.models.reference import RecordKind
from tests.fakes import make_exercise_record


@pytest.mark.unit
class TestParseCache:
    def test_hit_does_not_reparse(self):
        cache = ParseCache(capacity=10)
        calls = []

        def parse():
            calls.append(1)
            return object()

        first = cache.get_or_parse("r1", parse)
        second = cache.get_or_parse("r1", parse)

        assert first is second
        assert len(calls) == 1
        stats = cache.stats()
        assert (stats.hits, stats.misses) == (1, 1)
        assert stats.hit_rate == 0.5

    def test_none_results_are_cached(self):
        cache = ParseCache(capacity=10)
        calls = []

        def parse():
            calls.append(1)
            return None

        assert cache.get_or_parse("bad", parse) is None
        assert cache.get_or_parse("bad", parse) is None
        assert len(calls) == 1

    def test_evicts_oldest_first(self):
        cache = ParseCache(capacity=2)
        cache.get_or_parse("a", lambda: "A")
        cache.get_or_parse("b", lambda: "B")
        cache.get_or_parse("c", lambda: "C")

        assert "a" not in cache
        assert "b" in cache and "c" in cache
        assert cache.stats().evictions == 1
        assert len(cache) == 2

    def test_hit_refreshes_entry(self):
        cache = ParseCache(capacity=2)
        cache.get_or_parse("a", lambda: "A")
        cache.get_or_parse("b", lambda: "B")
        cache.get_or_parse("a", lambda: "A2")
        cache.get_or_parse("c", lambda: "C")

        assert "a" in cache
        assert "b" not in cache

    def test_clear_keeps_counters(self):
        cache = ParseCache(capacity=5)
        cache.get_or_parse("a", lambda: 1)
        cache.clear()

        assert len(cache) == 0
        assert cache.stats().misses == 1

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            ParseCache(capacity=0)

    def test_concurrent_access(self):
        cache = ParseCache(capacity=50)

        def worker(offset):
            for i in range(200):
                key = (offset + i) % 80
                assert cache.get_or_parse(key, lambda: key * 2) == key * 2

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = cache.stats()
        assert stats.size <= 50
        assert stats.hits + stats.misses == 8 * 200


@pytest.mark.unit
class TestRecordParser:
    def test_parse_twice_returns_same_object_without_new_miss(self):
        parser = RecordParser(ParseCache(capacity=10))
        record = make_exercise_record("squat")

        first = parser.parse(record)
        misses = parser.cache.stats().misses
        second = parser.parse(record)

        assert isinstance(first, Exercise)
        assert second is first
        assert parser.cache.stats().misses == misses

    def test_parse_as_wrong_kind_raises(self):
        parser = RecordParser()
        with pytest.raises(UnsupportedRecordKindError):
            parser.parse_as(make_exercise_record("squat"), RecordKind.TEMPLATE)

    def test_parsers_have_independent_caches(self):
        one, two = RecordParser(), RecordParser()
        one.parse(make_exercise_record("squat"))
        assert len(one.cache) == 1
        assert len(two.cache) == 0
