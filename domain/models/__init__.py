"""
Domain models for workout records.

Pure, immutable models independent of the record transport and cache:
- RawRecord / RecordDraft: wire shape of records as fetched and as published
- Reference: ``kind:authority:identifier`` address between records
- Exercise: exercise definition with its declared parameter schema
- Template / TemplateExercise: workout template and its grouped exercise slots
- WorkoutRecord / CompletedSet: completed workout and its sets
- Collection: replaceable list of content references
- ParameterValue / LegacyParameterView / InterpretationResult: interpreted parameters

Usage:
    >>> from domain.models import Reference, RecordKind
    >>> ref = Reference.parse("33402:" + "b" * 64 + ":push-day")
    >>> ref.kind is RecordKind.TEMPLATE
    True
"""

from domain.models.collection import Collection, LibraryCollectionType
from domain.models.exercise import Exercise
from domain.models.parameters import (
    InterpretationResult,
    LegacyParameterView,
    ParameterValue,
)
from domain.models.record import RawRecord, RecordDraft, newest_per_address
from domain.models.reference import REFERENCEABLE_KINDS, RecordKind, Reference
from domain.models.template import Template, TemplateExercise
from domain.models.workout_record import (
    CompletedSet,
    SetType,
    WorkoutRecord,
    WorkoutType,
)

__all__ = [
    # Wire shapes
    "RawRecord",
    "RecordDraft",
    "newest_per_address",
    # Addressing
    "Reference",
    "RecordKind",
    "REFERENCEABLE_KINDS",
    # Entities
    "Exercise",
    "Template",
    "TemplateExercise",
    "WorkoutRecord",
    "CompletedSet",
    "Collection",
    # Parameters
    "ParameterValue",
    "LegacyParameterView",
    "InterpretationResult",
    # Enums
    "WorkoutType",
    "SetType",
    "LibraryCollectionType",
]
