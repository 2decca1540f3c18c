"""
Domain layer for workout record resolution.

This package contains pure domain models, converters and services that are
independent of infrastructure concerns (record cache, network, settings).
"""

from domain.models import (
    Collection,
    CompletedSet,
    Exercise,
    RawRecord,
    RecordDraft,
    RecordKind,
    Reference,
    Template,
    TemplateExercise,
    WorkoutRecord,
)

__all__ = [
    "Collection",
    "CompletedSet",
    "Exercise",
    "RawRecord",
    "RecordDraft",
    "RecordKind",
    "Reference",
    "Template",
    "TemplateExercise",
    "WorkoutRecord",
]
