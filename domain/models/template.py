"""
Workout template parsed from a template record (kind 33402).

Raw template records express "N sets of exercise X" as N repeated
``exercise`` entries sharing one reference. The parsed template holds one
TemplateExercise per distinct reference, in first-occurrence order.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models.reference import RecordKind, Reference


class TemplateExercise(BaseModel):
    """
    One exercise slot in a template.

    ``parameters`` holds the raw positional values from the first entry of
    the group; they are interpreted later against the exercise's declared
    schema (see ``domain.services.parameter_interpreter``).
    """

    exercise_ref: str = Field(..., description="Raw 'kind:authority:identifier' reference")
    sets: int = Field(default=1, ge=1, description="Number of entries sharing this reference")
    parameters: List[str] = Field(
        default_factory=list, description="Raw positional parameter values"
    )

    model_config = {"frozen": True}

    @property
    def reference(self) -> Optional[Reference]:
        return Reference.try_parse(self.exercise_ref)


class Template(BaseModel):
    """Value object representing a workout template."""

    id: str = Field(..., min_length=1, description="Local identifier (d-tag)")
    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    exercises: List[TemplateExercise] = Field(default_factory=list)
    estimated_duration: Optional[int] = Field(
        default=None, ge=0, description="Estimated duration in seconds"
    )
    difficulty: Optional[str] = Field(default=None)
    categories: List[str] = Field(default_factory=list)

    author: str = Field(...)
    created_at: datetime = Field(...)
    record_id: Optional[str] = Field(default=None)

    model_config = {"frozen": True}

    @property
    def reference(self) -> Reference:
        return Reference(kind=RecordKind.TEMPLATE, authority=self.author, identifier=self.id)

    @property
    def exercise_refs(self) -> List[str]:
        """Distinct exercise references in first-occurrence order."""
        return [entry.exercise_ref for entry in self.exercises]

    @property
    def total_sets(self) -> int:
        return sum(entry.sets for entry in self.exercises)

    def __str__(self) -> str:
        return f"{self.name} ({len(self.exercises)} exercises, {self.total_sets} sets)"
