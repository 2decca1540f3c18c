"""
Completed-workout record (kind 1301).

Each completed set is one ``exercise`` entry in the raw record using the
positional layout ``[ref, relay, weight, reps, rpe, set_type, set_number]``.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from domain.models.reference import Reference


class WorkoutType(str, Enum):
    """Workout style as written on the wire."""

    STRENGTH = "strength"
    CIRCUIT = "circuit"
    TIMED_ROUNDS = "emom"
    AMRAP = "amrap"


class SetType(str, Enum):
    """Kind of set performed."""

    WARMUP = "warmup"
    NORMAL = "normal"
    DROP = "drop"
    FAILURE = "failure"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "SetType":
        """Case-insensitive lookup; 'working' and unknown values map to NORMAL."""
        if not value:
            return cls.NORMAL
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NORMAL


class CompletedSet(BaseModel):
    """A single completed set within a workout record."""

    exercise_ref: str = Field(..., description="Raw exercise reference")
    set_number: int = Field(..., ge=1, description="1-based set number per exercise")
    reps: int = Field(default=1, ge=0)
    weight: float = Field(default=0.0, ge=0, description="Weight in kg, 0 for bodyweight")
    rpe: Optional[float] = Field(default=None, ge=0, le=10, description="Effort rating")
    set_type: SetType = Field(default=SetType.NORMAL)
    completed_at: datetime = Field(...)
    parameters: List[str] = Field(
        default_factory=list, description="Raw positional values for interpretation"
    )

    model_config = {"frozen": True}

    @property
    def reference(self) -> Optional[Reference]:
        return Reference.try_parse(self.exercise_ref)

    @property
    def dedup_key(self) -> tuple:
        """Identity of a set; set_number keeps otherwise identical sets distinct."""
        return (
            self.exercise_ref,
            self.set_number,
            self.reps,
            self.weight,
            self.rpe,
            self.set_type.value,
        )


class WorkoutRecord(BaseModel):
    """
    Aggregate representing a completed workout.

    Sets keep their wire order; ``sets_by_exercise()`` groups them per
    exercise reference in first-occurrence order.
    """

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(default="")
    workout_type: WorkoutType = Field(default=WorkoutType.STRENGTH)
    started_at: datetime = Field(...)
    ended_at: datetime = Field(...)
    completed: bool = Field(default=True)
    sets: List[CompletedSet] = Field(default_factory=list)
    template_ref: Optional[str] = Field(default=None, description="Template followed, if any")
    notes: Optional[str] = Field(default=None)

    author: str = Field(...)
    created_at: datetime = Field(...)
    record_id: Optional[str] = Field(default=None)

    model_config = {"frozen": True}

    @field_validator("ended_at")
    @classmethod
    def validate_end(cls, v: datetime, info) -> datetime:
        started = info.data.get("started_at")
        if started is not None and v < started:
            raise ValueError("Workout cannot end before it starts")
        return v

    @property
    def duration_seconds(self) -> int:
        return int((self.ended_at - self.started_at).total_seconds())

    @property
    def template_reference(self) -> Optional[Reference]:
        return Reference.try_parse(self.template_ref)

    @property
    def total_reps(self) -> int:
        return sum(s.reps for s in self.sets)

    @property
    def exercise_refs(self) -> List[str]:
        """Distinct exercise references in first-occurrence order."""
        return list(dict.fromkeys(s.exercise_ref for s in self.sets))

    def sets_by_exercise(self) -> Dict[str, List[CompletedSet]]:
        grouped: Dict[str, List[CompletedSet]] = {}
        for completed in self.sets:
            grouped.setdefault(completed.exercise_ref, []).append(completed)
        return grouped
