"""
Raw record wire shape and the tag-list accessors parsers are written against.

A raw record is what the provider returns:
``{kind, authority, identifier, content, tags, created_at, id}`` where ``tags``
is a list of entries, each ``[name, *positional_values]``.
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from domain.models.reference import RecordKind, Reference

Tag = List[str]


def first_entry(tags: Sequence[Sequence[str]], name: str) -> Optional[List[str]]:
    """Return the first entry named ``name`` (without the name), or None."""
    for tag in tags:
        if tag and tag[0] == name:
            return list(tag[1:])
    return None


def first_value(tags: Sequence[Sequence[str]], name: str) -> Optional[str]:
    """Return the first positional value of the first entry named ``name``."""
    entry = first_entry(tags, name)
    if not entry:
        return None
    return entry[0]


def all_values(tags: Sequence[Sequence[str]], name: str) -> List[str]:
    """Return the first positional value of every entry named ``name``."""
    return [tag[1] for tag in tags if len(tag) > 1 and tag[0] == name]


def all_entries(tags: Sequence[Sequence[str]], name: str) -> List[List[str]]:
    """Return every entry named ``name`` (without the name), in order."""
    return [list(tag[1:]) for tag in tags if tag and tag[0] == name]


def has_value(tags: Sequence[Sequence[str]], name: str) -> bool:
    """True if an entry named ``name`` exists with a non-empty first value."""
    return bool(first_value(tags, name))


class RawRecord(BaseModel):
    """Immutable, author-signed record as delivered by the provider."""

    id: str = Field(..., min_length=1, description="Record identity (event id)")
    kind: int = Field(..., description="Record kind code")
    authority: str = Field(..., description="Authoring identity")
    identifier: str = Field(
        default="", description="Local identifier; mirrors the 'd' entry when present"
    )
    content: str = Field(default="", description="Free-form content body")
    tags: List[List[str]] = Field(default_factory=list, description="Tagged field entries")
    created_at: int = Field(..., ge=0, description="Unix timestamp (seconds)")

    model_config = {"frozen": True}

    @property
    def record_kind(self) -> Optional[RecordKind]:
        return RecordKind.from_code(self.kind)

    @property
    def d_tag(self) -> str:
        """Identifier from the 'd' entry, falling back to the top-level field."""
        return first_value(self.tags, "d") or self.identifier

    @property
    def address(self) -> tuple:
        """(kind, authority, identifier) replaceable-record key."""
        return (self.kind, self.authority, self.d_tag)

    def reference(self) -> Optional[Reference]:
        """Reference pointing at this record, for addressable kinds."""
        kind = self.record_kind
        if kind is None or not kind.is_addressable:
            return None
        return Reference(kind=kind, authority=self.authority, identifier=self.d_tag)

    def reference_string(self) -> str:
        """Best-effort reference text for diagnostics, even for invalid records."""
        return f"{self.kind}:{self.authority}:{self.d_tag or '?'}"

    def first_value(self, name: str) -> Optional[str]:
        return first_value(self.tags, name)

    def all_values(self, name: str) -> List[str]:
        return all_values(self.tags, name)

    def all_entries(self, name: str) -> List[List[str]]:
        return all_entries(self.tags, name)


class RecordDraft(BaseModel):
    """
    Unsigned record ready to hand to the provider's publish operation.

    Signing and identity assignment belong to the provider.
    """

    kind: int = Field(..., description="Record kind code")
    authority: str = Field(..., description="Authoring identity the record is published as")
    content: str = Field(default="")
    tags: List[List[str]] = Field(default_factory=list)
    created_at: int = Field(..., ge=0, description="Unix timestamp (seconds)")

    model_config = {"frozen": True}

    @property
    def identifier(self) -> str:
        return first_value(self.tags, "d") or ""


def newest_per_address(records: Sequence[RawRecord]) -> List[RawRecord]:
    """
    Keep only the most recently created record for each address.

    Non-addressable records (workout records) are keyed by record id and
    always kept. Ties on ``created_at`` go to the larger record id so the
    choice is deterministic. First-seen order of addresses is preserved.
    """
    chosen = {}
    for record in records:
        kind = record.record_kind
        key = record.address if kind is not None and kind.is_addressable else ("id", record.id)
        current = chosen.get(key)
        if current is None or (record.created_at, record.id) > (current.created_at, current.id):
            chosen[key] = record
    return list(chosen.values())
