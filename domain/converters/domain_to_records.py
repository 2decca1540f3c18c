"""
Converters: domain objects -> unsigned record drafts for publishing.

Drafts carry the wire layout parsers in ``records_to_domain`` read back, so
a published workout, template or collection round-trips through the resolver.
"""

from typing import Dict, List, Optional, Sequence

from domain.models.record import RecordDraft
from domain.models.reference import RecordKind
from domain.models.template import Template, TemplateExercise
from domain.models.workout_record import CompletedSet, WorkoutRecord

DEFAULT_CLIENT = "POWR"
DEFAULT_EFFORT = 7


def _format_number(value: float) -> str:
    """Render whole numbers without a trailing '.0'."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _timestamp(value) -> str:
    return str(int(value.timestamp()))


def _format_duration(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds} seconds"
    if seconds < 3600:
        minutes, remainder = divmod(seconds, 60)
        return f"{minutes} minutes" if remainder == 0 else f"{minutes}m {remainder}s"
    hours, remainder = divmod(seconds, 3600)
    return f"{hours}h {remainder // 60}m"


def _exercise_summary(identifier: str, sets: List[CompletedSet]) -> str:
    reps = [s.reps for s in sets]
    rep_range = f"{min(reps)}-{max(reps)}" if len(sets) > 1 else str(reps[0])
    summary = f"{identifier}: {len(sets)}x{rep_range}"
    weights = [s.weight for s in sets]
    if any(w > 0 for w in weights):
        if len(sets) > 1:
            summary += f" @ {_format_number(min(weights))}-{_format_number(max(weights))}kg"
        else:
            summary += f" @ {_format_number(weights[0])}kg"
    return summary


def workout_summary(workout: WorkoutRecord) -> str:
    """
    Human-readable summary used as workout record content.

    Example:
        "Completed Push Day in 45 minutes. 6 sets, 48 total reps.
        Exercises: bench-press: 3x8 @ 80kg, dips: 3x8."
    """
    grouped: Dict[str, List[CompletedSet]] = {}
    for completed in workout.sets:
        identifier = completed.exercise_ref.split(":")[-1]
        grouped.setdefault(identifier, []).append(completed)

    summary = (
        f"Completed {workout.title} in {_format_duration(workout.duration_seconds)}. "
        f"{len(workout.sets)} sets, {workout.total_reps} total reps."
    )
    if grouped:
        exercises = ", ".join(_exercise_summary(i, s) for i, s in grouped.items())
        summary += f" Exercises: {exercises}."
    if workout.notes:
        summary += f" Notes: {workout.notes}"
    return summary


def completed_set_entry(completed: CompletedSet) -> List[str]:
    """``exercise`` entry for one set; set number goes in the last slot."""
    return [
        "exercise",
        completed.exercise_ref,
        "",
        _format_number(completed.weight),
        str(completed.reps),
        _format_number(completed.rpe if completed.rpe is not None else DEFAULT_EFFORT),
        completed.set_type.value,
        str(completed.set_number),
    ]


def workout_to_draft(workout: WorkoutRecord, client: str = DEFAULT_CLIENT) -> RecordDraft:
    """
    Build a workout record draft (kind 1301).

    Args:
        workout: Completed workout to publish
        client: Client name written to the 'client' entry

    Returns:
        RecordDraft authored by ``workout.author``, timestamped at the workout end.
    """
    tags: List[List[str]] = [
        ["d", workout.id],
        ["title", workout.title],
        ["type", workout.workout_type.value],
        ["start", _timestamp(workout.started_at)],
        ["end", _timestamp(workout.ended_at)],
        ["completed", "true" if workout.completed else "false"],
        ["duration", str(workout.duration_seconds)],
    ]
    if workout.template_ref:
        tags.append(["template", workout.template_ref, ""])

    tags.extend(completed_set_entry(s) for s in workout.sets)

    tags.append(["t", "fitness"])
    tags.append(["t", workout.workout_type.value])
    tags.append(["client", client])

    return RecordDraft(
        kind=int(RecordKind.WORKOUT_RECORD),
        authority=workout.author,
        content=workout_summary(workout),
        tags=tags,
        created_at=int(workout.ended_at.timestamp()),
    )


def collection_to_draft(
    authority: str,
    identifier: str,
    name: str,
    content_refs: Sequence[str],
    created_at: int,
    description: Optional[str] = None,
) -> RecordDraft:
    """
    Build a collection record draft (kind 30003).

    Every update to a collection is a complete new draft listing all content
    references; the newest record replaces the previous one.
    """
    tags: List[List[str]] = [["d", identifier], ["title", name]]
    if description:
        tags.append(["description", description])
    tags.extend(["a", ref] for ref in content_refs)

    return RecordDraft(
        kind=int(RecordKind.COLLECTION),
        authority=authority,
        content="",
        tags=tags,
        created_at=created_at,
    )


def template_exercise_entries(entry: TemplateExercise) -> List[List[str]]:
    """One ``exercise`` entry per planned set, each carrying the slot's parameters."""
    return [["exercise", entry.exercise_ref, "", *entry.parameters] for _ in range(entry.sets)]


def template_to_draft(template: Template, client: str = DEFAULT_CLIENT) -> RecordDraft:
    """
    Build a template record draft (kind 33402).

    A slot with N sets becomes N repeated ``exercise`` entries sharing one
    reference, so ``group_template_entries`` reads the same slots back.

    Args:
        template: Template to publish
        client: Client name written to the 'client' entry

    Returns:
        RecordDraft authored by ``template.author`` with the template's identifier.
    """
    tags: List[List[str]] = [["d", template.id], ["title", template.name]]
    if template.estimated_duration is not None:
        tags.append(["duration", str(template.estimated_duration)])
    if template.difficulty:
        tags.append(["difficulty", template.difficulty])

    for entry in template.exercises:
        tags.extend(template_exercise_entries(entry))

    tags.extend(["t", category] for category in template.categories)
    tags.append(["client", client])

    return RecordDraft(
        kind=int(RecordKind.TEMPLATE),
        authority=template.author,
        content=template.description,
        tags=tags,
        created_at=int(template.created_at.timestamp()),
    )
