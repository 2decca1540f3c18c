"""
Reference value object and record kind codes.

A reference addresses a record by ``kind:authority:identifier``. Kinds are
fixed by the record protocol; the core never invents new codes.

Examples:
    >>> ref = Reference.parse("33401:" + "a" * 64 + ":barbell-squat")
    >>> ref.kind is RecordKind.EXERCISE
    True
    >>> str(ref).endswith(":barbell-squat")
    True
"""

import logging
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

REFERENCE_DELIMITER = ":"
AUTHORITY_LENGTH = 64


class RecordKind(IntEnum):
    """Record kind codes consumed by the core."""

    WORKOUT_RECORD = 1301
    COLLECTION = 30003
    EXERCISE = 33401
    TEMPLATE = 33402

    @property
    def is_addressable(self) -> bool:
        """Addressable kinds are replaceable per (authority, identifier)."""
        return self is not RecordKind.WORKOUT_RECORD

    @classmethod
    def from_code(cls, code) -> Optional["RecordKind"]:
        """Return the kind for an int/str code, or None when unknown."""
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            return None


# Kinds that may appear as the first part of a reference string.
REFERENCEABLE_KINDS = frozenset(
    {RecordKind.EXERCISE, RecordKind.TEMPLATE, RecordKind.COLLECTION}
)


class Reference(BaseModel):
    """
    Immutable ``kind:authority:identifier`` address.

    Construct through ``parse()`` for wire strings; syntax checking with
    actionable diagnostics lives in ``domain.services.record_validator``.
    """

    kind: RecordKind = Field(..., description="Record kind code")
    authority: str = Field(..., min_length=1, description="Authoring identity (hex)")
    identifier: str = Field(..., description="Local identifier (d-tag), may be empty")

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, raw: str) -> "Reference":
        """
        Parse a wire reference string.

        Raises:
            ValueError: If the string is not three delimited parts with a known kind.
        """
        parts = raw.split(REFERENCE_DELIMITER)
        if len(parts) != 3:
            raise ValueError(f"Expected 3 parts in reference, got {len(parts)}: {raw!r}")
        kind = RecordKind.from_code(parts[0])
        if kind is None:
            raise ValueError(f"Unknown record kind {parts[0]!r} in reference {raw!r}")
        return cls(kind=kind, authority=parts[1], identifier=parts[2])

    @classmethod
    def try_parse(cls, raw: Optional[str]) -> Optional["Reference"]:
        """Parse a reference, returning None instead of raising."""
        if not raw:
            return None
        try:
            return cls.parse(raw)
        except ValueError:
            return None

    @staticmethod
    def normalize(raw: Optional[str]) -> Optional[str]:
        """
        Repair the duplicated-prefix corruption seen in stored template references.

        ``33402:pk:33402:pk:dtag`` becomes ``33402:pk:dtag``. Three-part strings
        are returned unchanged; anything shorter cannot be repaired.
        """
        if not raw:
            return None
        parts = raw.split(REFERENCE_DELIMITER)
        if len(parts) == 3:
            return raw
        if len(parts) == 5 and parts[0] == parts[2] and parts[1] == parts[3]:
            fixed = REFERENCE_DELIMITER.join((parts[0], parts[1], parts[4]))
            logger.info(f"Repaired duplicated reference prefix: {raw} -> {fixed}")
            return fixed
        if len(parts) > 3:
            fixed = REFERENCE_DELIMITER.join((parts[0], parts[1], parts[-1]))
            logger.warning(f"Repaired unrecognized reference corruption: {raw} -> {fixed}")
            return fixed
        logger.warning(f"Cannot normalize reference: {raw}")
        return None

    @property
    def address(self) -> tuple:
        """(kind, authority, identifier) tuple used as a grouping/dedup key."""
        return (int(self.kind), self.authority, self.identifier)

    def __str__(self) -> str:
        return REFERENCE_DELIMITER.join(
            (str(int(self.kind)), self.authority, self.identifier)
        )
