"""
Fake implementations and record factories for testing.

This package provides an in-memory RecordProvider and factory functions that
build well-formed raw records of every kind, so tests never need a database
or a relay gateway.

Usage:
    from tests.fakes import FakeRecordProvider, make_exercise_record, exercise_ref

    provider = FakeRecordProvider()
    provider.seed([make_exercise_record("squat")])
    ref = exercise_ref("squat")
"""
import itertools
from typing import List, Optional, Sequence, Tuple

from domain.models.record import RawRecord
from domain.models.reference import RecordKind
from tests.fakes.record_provider import FakeRecordProvider, FetchCall

AUTHORITY_A = "a" * 64
AUTHORITY_B = "b" * 64
AUTHORITY_C = "c" * 64

BASE_TIMESTAMP = 1700000000

_ids = itertools.count(1)


def _record_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


# =============================================================================
# References
# =============================================================================


def exercise_ref(identifier: str, authority: str = AUTHORITY_A) -> str:
    return f"{int(RecordKind.EXERCISE)}:{authority}:{identifier}"


def template_ref(identifier: str, authority: str = AUTHORITY_A) -> str:
    return f"{int(RecordKind.TEMPLATE)}:{authority}:{identifier}"


def collection_ref(identifier: str, authority: str = AUTHORITY_A) -> str:
    return f"{int(RecordKind.COLLECTION)}:{authority}:{identifier}"


# =============================================================================
# Record Factories
# =============================================================================


def make_exercise_record(
    identifier: str,
    *,
    authority: str = AUTHORITY_A,
    name: Optional[str] = None,
    format: Sequence[str] = ("weight", "reps", "rpe", "set_type"),
    format_units: Sequence[str] = ("kg", "count", "0-10", "enum"),
    equipment: str = "barbell",
    categories: Sequence[str] = ("legs",),
    content: str = "",
    created_at: int = BASE_TIMESTAMP,
    record_id: Optional[str] = None,
) -> RawRecord:
    """Build a valid exercise record (kind 33401)."""
    tags: List[List[str]] = [
        ["d", identifier],
        ["title", name or identifier.replace("-", " ").title()],
        ["format", *format],
        ["format_units", *format_units],
        ["equipment", equipment],
    ]
    tags.extend(["t", category] for category in categories)
    return RawRecord(
        id=record_id or _record_id("ex"),
        kind=int(RecordKind.EXERCISE),
        authority=authority,
        identifier=identifier,
        content=content,
        tags=tags,
        created_at=created_at,
    )


def make_template_record(
    identifier: str,
    entries: Sequence[Tuple[str, Sequence[str]]] = (),
    *,
    authority: str = AUTHORITY_A,
    name: Optional[str] = None,
    duration: Optional[int] = None,
    created_at: int = BASE_TIMESTAMP,
    record_id: Optional[str] = None,
) -> RawRecord:
    """
    Build a template record (kind 33402).

    Args:
        entries: (exercise_ref, parameters) pairs, one per set, in wire order
    """
    tags: List[List[str]] = [["d", identifier], ["title", name or f"Template {identifier}"]]
    if duration is not None:
        tags.append(["duration", str(duration)])
    tags.extend(["exercise", ref, "", *params] for ref, params in entries)
    return RawRecord(
        id=record_id or _record_id("tpl"),
        kind=int(RecordKind.TEMPLATE),
        authority=authority,
        identifier=identifier,
        content="",
        tags=tags,
        created_at=created_at,
    )


def make_collection_record(
    identifier: str,
    content_refs: Sequence[str] = (),
    *,
    authority: str = AUTHORITY_A,
    name: Optional[str] = None,
    created_at: int = BASE_TIMESTAMP,
    record_id: Optional[str] = None,
) -> RawRecord:
    """Build a collection record (kind 30003)."""
    tags: List[List[str]] = [["d", identifier], ["title", name or f"Collection {identifier}"]]
    tags.extend(["a", ref] for ref in content_refs)
    return RawRecord(
        id=record_id or _record_id("col"),
        kind=int(RecordKind.COLLECTION),
        authority=authority,
        identifier=identifier,
        content="",
        tags=tags,
        created_at=created_at,
    )


def make_workout_record(
    identifier: str,
    sets: Sequence[Sequence[str]] = (),
    *,
    authority: str = AUTHORITY_A,
    title: str = "Leg Day",
    workout_type: str = "strength",
    start: int = BASE_TIMESTAMP,
    end: int = BASE_TIMESTAMP + 3600,
    template: Optional[str] = None,
    record_id: Optional[str] = None,
) -> RawRecord:
    """
    Build a completed-workout record (kind 1301).

    Args:
        sets: One positional entry per set, ``[ref, relay, weight, reps, rpe, set_type, set_number]``
    """
    tags: List[List[str]] = [
        ["d", identifier],
        ["title", title],
        ["type", workout_type],
        ["start", str(start)],
        ["end", str(end)],
        ["completed", "true"],
    ]
    if template is not None:
        tags.append(["template", template, ""])
    tags.extend(["exercise", *entry] for entry in sets)
    return RawRecord(
        id=record_id or _record_id("wk"),
        kind=int(RecordKind.WORKOUT_RECORD),
        authority=authority,
        identifier=identifier,
        content="",
        tags=tags,
        created_at=end,
    )


def create_record_provider(
    *,
    cache: Sequence[RawRecord] = (),
    network: Sequence[RawRecord] = (),
) -> FakeRecordProvider:
    """
    Create a FakeRecordProvider with pre-populated stores.

    Args:
        cache: Records readable through the cache route
        network: Records readable through the network route
    """
    provider = FakeRecordProvider()
    provider.seed_cache(cache)
    provider.seed_network(network)
    return provider


__all__ = [
    "FakeRecordProvider",
    "FetchCall",
    "AUTHORITY_A",
    "AUTHORITY_B",
    "AUTHORITY_C",
    "BASE_TIMESTAMP",
    "exercise_ref",
    "template_ref",
    "collection_ref",
    "make_exercise_record",
    "make_template_record",
    "make_collection_record",
    "make_workout_record",
    "create_record_provider",
]
