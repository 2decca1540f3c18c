"""
Record Search Use Case.

Free-text search over exercise and template records. Matching is a
case-insensitive substring test on the parsed records; the provider is
only asked for records of the right kind.

Template search reads the local cache first and tops up from the network
when the cache holds too few matches. Exercise search uses a single
cache-first fetch.
"""
import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Union

from application.exceptions import ProviderError
from application.ports.record_provider import RecordFilter
from application.services.cache_strategy import CacheStrategy, CacheStrategySelector
from application.services.record_parser import RecordParser
from domain.models.exercise import Exercise
from domain.models.record import RawRecord, newest_per_address
from domain.models.reference import RecordKind
from domain.models.template import Template

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_RESULTS = 50
DEFAULT_EXERCISE_RESULTS = 30
CACHE_SCAN_LIMIT = 200
# Fewer cached matches than this triggers a network search.
MIN_CACHED_MATCHES = 10
NETWORK_LOOKBACK_SECONDS = 30 * 24 * 60 * 60

MUSCLE_GROUP_ALIASES: Dict[str, List[str]] = {
    "chest": ["chest", "pecs", "pectoral", "push"],
    "back": ["back", "lats", "latissimus", "rhomboids", "pull"],
    "legs": ["legs", "quads", "hamstrings", "glutes", "calves", "leg"],
    "arms": ["arms", "biceps", "triceps", "forearms", "arm"],
    "shoulders": ["shoulders", "delts", "deltoids", "shoulder"],
    "core": ["core", "abs", "abdominals", "obliques"],
}


def _unix_now() -> int:
    return int(time.time())


def _contains(values: Sequence[Optional[str]], needle: str) -> bool:
    return any(value and needle in value.lower() for value in values)


def template_matches(template: Template, term: str) -> bool:
    """
    True if ``term`` matches the template.

    Checks the name, description, categories and exercise references, then
    muscle-group aliases: searching "pecs" finds a template tagged "chest".
    """
    needle = term.lower()
    if _contains([template.name, template.description, *template.categories], needle):
        return True
    if _contains(template.exercise_refs, needle):
        return True

    for aliases in MUSCLE_GROUP_ALIASES.values():
        if needle not in aliases:
            continue
        if any(category.lower() in aliases for category in template.categories):
            return True
        if any(alias in ref.lower() for ref in template.exercise_refs for alias in aliases):
            return True
    return False


def exercise_matches(exercise: Exercise, term: str) -> bool:
    """True if ``term`` matches the exercise name, description, categories or equipment."""
    needle = term.lower()
    return _contains(
        [exercise.name, exercise.description, exercise.equipment, *exercise.categories], needle
    )


class RecordSearchUseCase:
    """
    Use case for searching exercises and workout templates.

    Results are newest first, one per address, and never exceed the
    requested maximum.
    """

    def __init__(
        self,
        selector: CacheStrategySelector,
        parser: RecordParser,
        clock: Callable[[], int] = _unix_now,
    ):
        self._selector = selector
        self._parser = parser
        self._clock = clock

    async def search_workout_templates(
        self,
        term: str,
        max_results: int = DEFAULT_TEMPLATE_RESULTS,
        authors: Optional[Sequence[str]] = None,
    ) -> List[Template]:
        """
        Search templates in the local cache, then the network if needed.

        The network search only runs when the cache yields fewer than
        ``min(max_results, 10)`` matches, and only looks at the last 30 days.
        A failed network search keeps the cached matches.

        Raises:
            ProviderError: If the cache read failed.
        """
        started = time.perf_counter()
        cached_filter = RecordFilter(
            kinds=[int(RecordKind.TEMPLATE)], authors=list(authors or []), limit=CACHE_SCAN_LIMIT
        )
        cached = self._match_templates(
            await self._selector.fetch([cached_filter], strategy=CacheStrategy.CACHE_ONLY), term
        )
        if len(cached) >= min(max_results, MIN_CACHED_MATCHES):
            logger.info(f"Found {len(cached)} cached templates for {term!r}")
            return cached[:max_results]

        network_filter = cached_filter.model_copy(
            update={
                "limit": max(max_results * 2, 1),
                "since": self._clock() - NETWORK_LOOKBACK_SECONDS,
            }
        )
        try:
            fresh = self._match_templates(
                await self._selector.fetch(
                    [network_filter], strategy=CacheStrategy.NETWORK_ONLY
                ),
                term,
            )
        except ProviderError as e:
            logger.warning(f"Network template search for {term!r} failed, using cache: {e}")
            return cached[:max_results]

        merged: Dict[str, Template] = {str(t.reference): t for t in cached}
        for template in fresh:
            current = merged.get(str(template.reference))
            if current is None or template.created_at >= current.created_at:
                merged[str(template.reference)] = template
        results = sorted(merged.values(), key=lambda t: t.created_at, reverse=True)[:max_results]

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Found {len(results)} templates for {term!r} "
            f"({len(cached)} cached + {len(fresh)} network) in {elapsed_ms:.1f}ms"
        )
        return results

    async def search_exercises(
        self,
        term: str,
        max_results: int = DEFAULT_EXERCISE_RESULTS,
        authors: Optional[Sequence[str]] = None,
        strategy: Union[CacheStrategy, str] = CacheStrategy.CACHE_FIRST,
    ) -> List[Exercise]:
        """
        Search exercise definitions.

        Raises:
            ProviderError: If the fetch failed or timed out.
        """
        record_filter = RecordFilter(
            kinds=[int(RecordKind.EXERCISE)], authors=list(authors or []), limit=CACHE_SCAN_LIMIT
        )
        records = await self._selector.fetch([record_filter], strategy=strategy)
        exercises = [
            exercise
            for exercise in self._parse_newest(records, RecordKind.EXERCISE)
            if exercise_matches(exercise, term)
        ]
        exercises.sort(key=lambda e: e.created_at, reverse=True)
        logger.info(f"Found {len(exercises)} exercises for {term!r}")
        return exercises[:max_results]

    def _match_templates(self, records: Sequence[RawRecord], term: str) -> List[Template]:
        templates = [
            template
            for template in self._parse_newest(records, RecordKind.TEMPLATE)
            if template_matches(template, term)
        ]
        templates.sort(key=lambda t: t.created_at, reverse=True)
        return templates

    def _parse_newest(self, records: Sequence[RawRecord], kind: RecordKind) -> list:
        parsed = []
        for record in newest_per_address(records):
            item = self._parser.parse_as(record, kind)
            if item is not None:
                parsed.append(item)
        return parsed
