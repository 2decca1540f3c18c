"""
Exercise definition parsed from an exercise record (kind 33401).

An exercise declares the positional parameter schema that templates and
workout records fill in: ``format`` names each slot and ``format_units``
gives the unit of the slot at the same position.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models.reference import RecordKind, Reference

# Category tags that double as muscle-group labels.
MUSCLE_GROUP_TAGS = ("chest", "back", "shoulders", "arms", "legs", "core", "cardio")


class Exercise(BaseModel):
    """
    Value object representing an exercise definition.

    Examples:
        >>> exercise = Exercise(
        ...     id="barbell-squat",
        ...     name="Barbell Back Squat",
        ...     format=["weight", "reps"],
        ...     format_units=["kg", "count"],
        ...     equipment="barbell",
        ...     author="a" * 64,
        ...     created_at=1700000000,
        ... )
        >>> exercise.parameter_unit("reps")
        'count'
    """

    # Identity
    id: str = Field(..., min_length=1, description="Local identifier (d-tag)")
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field(default="", description="Free-form description")

    # Declared parameter schema
    format: List[str] = Field(
        default_factory=list, description="Ordered parameter names, e.g. ['weight', 'reps']"
    )
    format_units: List[str] = Field(
        default_factory=list, description="Units parallel to format, e.g. ['kg', 'count']"
    )

    equipment: str = Field(..., description="Equipment tag (e.g. 'barbell')")
    difficulty: Optional[str] = Field(default=None)
    categories: List[str] = Field(
        default_factory=list, description="Free-form category tags ('t' entries)"
    )
    instructions: List[str] = Field(default_factory=list)

    # Provenance
    author: str = Field(..., description="Authoring identity")
    created_at: datetime = Field(..., description="Record creation time")
    record_id: Optional[str] = Field(default=None, description="Source record id")

    model_config = {"frozen": True}

    @property
    def reference(self) -> Reference:
        return Reference(kind=RecordKind.EXERCISE, authority=self.author, identifier=self.id)

    @property
    def muscle_groups(self) -> List[str]:
        return [tag for tag in self.categories if tag in MUSCLE_GROUP_TAGS]

    @property
    def has_parameter_schema(self) -> bool:
        return bool(self.format) and bool(self.format_units)

    def parameter_unit(self, name: str) -> Optional[str]:
        """Declared unit for a parameter name, or None if not declared."""
        for index, param in enumerate(self.format):
            if param == name and index < len(self.format_units):
                return self.format_units[index]
        return None

    def __str__(self) -> str:
        return f"{self.name} ({self.equipment})"
