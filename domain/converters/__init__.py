"""
Domain converters between raw records and typed domain objects.

- records_to_domain: RawRecord -> Exercise / Template / WorkoutRecord / Collection
- domain_to_records: WorkoutRecord / Template / collection contents -> RecordDraft

All converters are pure functions with no side effects.

Examples:
    >>> from domain.converters import parse_record
    >>> exercise = parse_record(raw_exercise_record)
    >>> exercise.format
    ['weight', 'reps']
"""

from domain.converters.domain_to_records import (
    collection_to_draft,
    template_to_draft,
    workout_summary,
    workout_to_draft,
)
from domain.converters.records_to_domain import (
    PARSERS,
    DomainObject,
    group_template_entries,
    parse_collection,
    parse_exercise,
    parse_record,
    parse_template,
    parse_workout_record,
)

__all__ = [
    "PARSERS",
    "DomainObject",
    "parse_record",
    "parse_exercise",
    "parse_template",
    "parse_workout_record",
    "parse_collection",
    "group_template_entries",
    "workout_to_draft",
    "collection_to_draft",
    "template_to_draft",
    "workout_summary",
]
