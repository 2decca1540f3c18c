"""
Curated collection (kind 30003), a replaceable list of content references.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models.reference import RecordKind, Reference


class LibraryCollectionType(str, Enum):
    """Standard per-user library collections and their fixed identifiers."""

    EXERCISE_LIBRARY = "powr-exercise-list"
    WORKOUT_LIBRARY = "powr-workout-list"
    COLLECTION_SUBSCRIPTIONS = "powr-collection-list"

    @property
    def display_name(self) -> str:
        return {
            LibraryCollectionType.EXERCISE_LIBRARY: "My Exercise Library",
            LibraryCollectionType.WORKOUT_LIBRARY: "My Workout Library",
            LibraryCollectionType.COLLECTION_SUBSCRIPTIONS: "My Collection Subscriptions",
        }[self]

    @property
    def display_description(self) -> str:
        return {
            LibraryCollectionType.EXERCISE_LIBRARY: "My saved exercises and movements",
            LibraryCollectionType.WORKOUT_LIBRARY: "My saved workout templates and routines",
            LibraryCollectionType.COLLECTION_SUBSCRIPTIONS: "Collections I follow from other users",
        }[self]


class Collection(BaseModel):
    """
    Value object for a collection.

    Only the newest record per (author, id) is authoritative; an update is a
    brand-new Collection, never an in-place edit.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    content_refs: List[str] = Field(
        default_factory=list, description="Ordered raw references of mixed kinds"
    )

    author: str = Field(...)
    created_at: datetime = Field(...)
    record_id: Optional[str] = Field(default=None)

    model_config = {"frozen": True}

    @property
    def reference(self) -> Reference:
        return Reference(kind=RecordKind.COLLECTION, authority=self.author, identifier=self.id)

    @property
    def item_count(self) -> int:
        return len(self.content_refs)

    def refs_of_kind(self, kind: RecordKind) -> List[str]:
        prefix = f"{int(kind)}:"
        return [ref for ref in self.content_refs if ref.startswith(prefix)]

    def contains(self, ref: str) -> bool:
        return ref in self.content_refs
