"""
Application Use Cases for workout record resolution.

This package contains application-level use cases that orchestrate domain logic
and coordinate between ports/adapters. Use cases are the entry points for
business operations.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and the record provider port
- Dependencies are injected via constructors for testability
- Use cases return domain models and result dataclasses, not API responses

Usage:
    from application.use_cases import ReferenceResolver, WorkoutHistoryUseCase

    resolver = ReferenceResolver(selector=selector)
    resolution = await resolver.resolve_templates(template_refs)
    for template in resolution.templates:
        print(template, [str(e) for e in resolution.exercises])

    history = WorkoutHistoryUseCase(provider=provider, selector=selector, resolver=resolver)
    workouts = await history.load_history(authority, limit=20)
"""

from application.use_cases.manage_library import (
    LibraryCollectionUseCase,
    LibraryUpdateResult,
    OfflineAvailability,
)
from application.use_cases.resolve_references import (
    CollectionContent,
    CollectionResolution,
    ExerciseResolution,
    ReferenceDiagnostic,
    ReferenceResolver,
    ResolvedTemplate,
    TemplateResolution,
    dedupe,
    group_references,
)
from application.use_cases.manage_templates import TemplateManagementUseCase
from application.use_cases.search_records import RecordSearchUseCase
from application.use_cases.workout_history import WorkoutHistoryUseCase

__all__ = [
    # Reference resolution
    "ReferenceResolver",
    "ReferenceDiagnostic",
    "ExerciseResolution",
    "TemplateResolution",
    "CollectionResolution",
    "CollectionContent",
    "ResolvedTemplate",
    "dedupe",
    "group_references",
    # Library collections
    "LibraryCollectionUseCase",
    "LibraryUpdateResult",
    "OfflineAvailability",
    # Workout history
    "WorkoutHistoryUseCase",
    # Templates and search
    "TemplateManagementUseCase",
    "RecordSearchUseCase",
]
