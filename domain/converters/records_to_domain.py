"""
Converters: raw records -> typed domain objects.

One pure parser per record kind, dispatched through a single
``kind -> parser`` table. Each parser validates first and returns None
(logging the diagnostic) when the record does not satisfy its kind's
schema. Parsers never raise for malformed input; handing a parser a record
of the wrong kind raises UnsupportedRecordKindError.

Wire layouts:
- exercise:  d, title, format[...], format_units[...], equipment, difficulty, t*
- template:  d, title, duration, difficulty, t*, exercise[ref, relay, *params]*
- workout:   d, title, type, start, end, completed, template[ref, relay],
             exercise[ref, relay, weight, reps, rpe, set_type, set_number]*
- collection: d, title|name, description, a[ref]*
"""

import json
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from domain.exceptions import UnsupportedRecordKindError
from domain.models.collection import Collection
from domain.models.exercise import Exercise
from domain.models.record import RawRecord, all_entries, first_entry, first_value
from domain.models.reference import RecordKind, Reference
from domain.models.template import Template, TemplateExercise
from domain.models.workout_record import CompletedSet, SetType, WorkoutRecord, WorkoutType
from domain.services.record_validator import validate_record

logger = logging.getLogger(__name__)

DomainObject = Union[Exercise, Template, WorkoutRecord, Collection]

# Positional slots after [ref, relay] in a workout-record exercise entry.
WORKOUT_PARAMETER_SLOTS = 4


def _to_int(value: Optional[str], default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        try:
            number = float(value)
        except ValueError:
            return default
        return int(number) if math.isfinite(number) else default


def _to_float(value: Optional[str], default: Optional[float] = None) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def _pad(entry: List[str], size: int) -> List[str]:
    return entry + [""] * (size - len(entry))


def _parse_content(content: str) -> Dict[str, Any]:
    """Content may be a JSON object carrying description/instructions."""
    if not content or not content.lstrip().startswith("{"):
        return {}
    try:
        data = json.loads(content)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _check_kind(record: RawRecord, expected: RecordKind) -> None:
    if record.kind != int(expected):
        raise UnsupportedRecordKindError(int(expected), record.kind)


def _validated(record: RawRecord, label: str) -> bool:
    result = validate_record(record)
    if not result.is_valid:
        logger.warning(
            f"Invalid {label} {record.reference_string()} (record {record.id}): {result.error}"
        )
        return False
    for warning in result.warnings:
        logger.debug(f"{label} {record.reference_string()}: {warning}")
    return True


def _build(model_cls, record: RawRecord, **fields):
    try:
        return model_cls(**fields)
    except ValidationError as e:
        logger.warning(
            f"Could not build {model_cls.__name__} from record {record.id}: "
            f"{e.error_count()} field error(s)"
        )
        return None


# =============================================================================
# Per-kind parsers
# =============================================================================


def parse_exercise(record: RawRecord) -> Optional[Exercise]:
    """Parse an exercise record (kind 33401)."""
    _check_kind(record, RecordKind.EXERCISE)
    if not _validated(record, "exercise"):
        return None

    content = _parse_content(record.content)
    instructions = content.get("instructions") or []
    if isinstance(instructions, str):
        instructions = [instructions]

    return _build(
        Exercise,
        record,
        id=record.d_tag,
        name=first_value(record.tags, "title") or first_value(record.tags, "name"),
        description=content.get("description", "") if content else record.content,
        format=first_entry(record.tags, "format") or [],
        format_units=first_entry(record.tags, "format_units") or [],
        equipment=first_value(record.tags, "equipment"),
        difficulty=first_value(record.tags, "difficulty"),
        categories=record.all_values("t"),
        instructions=[str(step) for step in instructions],
        author=record.authority,
        created_at=record.created_at,
        record_id=record.id,
    )


def group_template_entries(entries: List[List[str]]) -> List[TemplateExercise]:
    """
    Group repeated exercise entries into one slot per reference.

    The group size is the planned set count; the first entry's parameters
    represent the group. First-occurrence order is preserved.
    """
    groups: Dict[str, List[List[str]]] = {}
    for entry in entries:
        if not entry or not entry[0]:
            continue
        groups.setdefault(entry[0], []).append(entry)

    return [
        TemplateExercise(
            exercise_ref=ref,
            sets=len(group),
            parameters=list(group[0][2:]),
        )
        for ref, group in groups.items()
    ]


def parse_template(record: RawRecord) -> Optional[Template]:
    """Parse a workout template record (kind 33402)."""
    _check_kind(record, RecordKind.TEMPLATE)
    if not _validated(record, "template"):
        return None

    duration = _to_int(first_value(record.tags, "duration"))
    return _build(
        Template,
        record,
        id=record.d_tag,
        name=first_value(record.tags, "title")
        or first_value(record.tags, "name")
        or "Untitled Template",
        description=record.content,
        exercises=group_template_entries(all_entries(record.tags, "exercise")),
        estimated_duration=duration if duration is not None and duration >= 0 else None,
        difficulty=first_value(record.tags, "difficulty"),
        categories=record.all_values("t"),
        author=record.authority,
        created_at=record.created_at,
        record_id=record.id,
    )


def _parse_completed_sets(record: RawRecord) -> List[CompletedSet]:
    sets: List[CompletedSet] = []
    occurrences: Dict[str, int] = {}

    for entry in all_entries(record.tags, "exercise"):
        ref, _relay, weight, reps, rpe, set_type, set_number = _pad(entry, 7)[:7]
        if not ref:
            continue
        occurrences[ref] = occurrences.get(ref, 0) + 1

        number = _to_int(set_number)
        if number is None or number < 1:
            number = occurrences[ref]
        effort = _to_float(rpe)
        if effort is not None and not 0 <= effort <= 10:
            effort = None

        sets.append(
            CompletedSet(
                exercise_ref=ref,
                set_number=number,
                reps=max(_to_int(reps, 1), 0),
                weight=max(_to_float(weight, 0.0), 0.0),
                rpe=effort,
                set_type=SetType.coerce(set_type),
                completed_at=record.created_at,
                parameters=list(entry[2 : 2 + WORKOUT_PARAMETER_SLOTS]),
            )
        )
    return sets


def parse_workout_record(record: RawRecord) -> Optional[WorkoutRecord]:
    """Parse a completed-workout record (kind 1301)."""
    _check_kind(record, RecordKind.WORKOUT_RECORD)
    if not _validated(record, "workout record"):
        return None

    return _build(
        WorkoutRecord,
        record,
        id=record.d_tag or record.id,
        title=first_value(record.tags, "title"),
        description=record.content,
        workout_type=WorkoutType(first_value(record.tags, "type")),
        started_at=int(first_value(record.tags, "start")),
        ended_at=int(first_value(record.tags, "end")),
        completed=first_value(record.tags, "completed") == "true",
        sets=_parse_completed_sets(record),
        template_ref=Reference.normalize(first_value(record.tags, "template")),
        author=record.authority,
        created_at=record.created_at,
        record_id=record.id,
    )


def parse_collection(record: RawRecord) -> Optional[Collection]:
    """Parse a collection record (kind 30003)."""
    _check_kind(record, RecordKind.COLLECTION)
    if not _validated(record, "collection"):
        return None

    return _build(
        Collection,
        record,
        id=record.d_tag,
        name=first_value(record.tags, "name")
        or first_value(record.tags, "title")
        or "Untitled Collection",
        description=first_value(record.tags, "description") or record.content,
        content_refs=record.all_values("a"),
        author=record.authority,
        created_at=record.created_at,
        record_id=record.id,
    )


PARSERS: Dict[RecordKind, Callable[[RawRecord], Optional[DomainObject]]] = {
    RecordKind.EXERCISE: parse_exercise,
    RecordKind.TEMPLATE: parse_template,
    RecordKind.WORKOUT_RECORD: parse_workout_record,
    RecordKind.COLLECTION: parse_collection,
}


def parse_record(record: RawRecord) -> Optional[DomainObject]:
    """
    Parse any supported record into its domain object.

    Returns:
        The typed object, or None when the kind is unknown or the record
        fails validation.
    """
    kind = record.record_kind
    if kind is None:
        logger.warning(f"No parser for record kind {record.kind} (record {record.id})")
        return None
    return PARSERS[kind](record)
