"""
Workout History Use Case.

Loads a user's completed workouts, publishes new ones and resolves the
template a workout followed.
"""
import logging
from typing import List, Optional, Union

from application.ports.record_provider import RecordFilter, RecordProvider
from application.services.cache_strategy import CacheStrategy, CacheStrategySelector
from application.use_cases.resolve_references import ReferenceResolver, ResolvedTemplate
from domain.converters.domain_to_records import DEFAULT_CLIENT, workout_to_draft
from domain.models.record import RecordDraft
from domain.models.reference import RecordKind, Reference
from domain.models.workout_record import WorkoutRecord
from domain.services.record_validator import validate_reference

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class WorkoutHistoryUseCase:
    """
    Use case for workout history.

    Reads go through the cache strategy selector (cache-first unless told
    otherwise) and are parsed with the resolver's memoizing parser.
    """

    def __init__(
        self,
        provider: RecordProvider,
        selector: CacheStrategySelector,
        resolver: ReferenceResolver,
        client: str = DEFAULT_CLIENT,
    ):
        self._provider = provider
        self._selector = selector
        self._resolver = resolver
        self._client = client

    @staticmethod
    def _history_filter(authority: str, limit: Optional[int] = None) -> RecordFilter:
        return RecordFilter(
            kinds=[int(RecordKind.WORKOUT_RECORD)], authors=[authority], limit=limit
        )

    async def load_history(
        self,
        authority: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        strategy: Union[CacheStrategy, str] = CacheStrategy.CACHE_FIRST,
    ) -> List[WorkoutRecord]:
        """
        Load completed workouts, newest first.

        Records that fail validation are skipped.

        Raises:
            ProviderError: If the fetch failed or timed out.
        """
        records = await self._selector.fetch(
            [self._history_filter(authority, limit)], strategy=strategy, max_results=limit
        )
        workouts: List[WorkoutRecord] = []
        for record in records:
            workout = self._resolver.parser.parse_as(record, RecordKind.WORKOUT_RECORD)
            if workout is not None:
                workouts.append(workout)

        workouts.sort(key=lambda w: w.started_at, reverse=True)
        skipped = len(records) - len(workouts)
        if skipped:
            logger.warning(f"Skipped {skipped} invalid workout records for {authority[:8]}")
        logger.info(f"Loaded {len(workouts)} workouts for {authority[:8]}")
        return workouts

    async def load_offline_count(self, authority: str) -> int:
        """Number of workout records readable from the local cache."""
        availability = await self._selector.check_availability([self._history_filter(authority)])
        return availability.count

    async def publish_workout(self, workout: WorkoutRecord) -> RecordDraft:
        """Build a workout record from a completed workout and publish it."""
        draft = workout_to_draft(workout, client=self._client)
        await self._provider.publish_record(draft)
        logger.info(f"Published workout {workout.id} with {len(workout.sets)} sets")
        return draft

    async def resolve_workout_template(self, workout: WorkoutRecord) -> Optional[ResolvedTemplate]:
        """
        Resolve the template a workout followed.

        Returns None when the workout has no template reference, when the
        stored reference is unusable, or when the template is not found.
        """
        ref = Reference.normalize(workout.template_ref)
        if ref is None:
            return None

        result = validate_reference(ref, expected_kind=RecordKind.TEMPLATE)
        if not result.is_valid:
            logger.warning(f"Workout {workout.id} has an unusable template reference: {result.error}")
            return None
        return await self._resolver.resolve_single_template(ref)
