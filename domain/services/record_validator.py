"""
Record and reference validation.

Validates raw records against the schema required for their kind and checks
reference syntax wherever a reference string appears. Validation is pure:
problems are returned as data, never raised, so one bad record in a batch
does not affect the others.

Rules per kind:
- Exercise (33401): d, title, format, format_units, equipment required;
  format and format_units must have the same length.
- Template (33402): d required; malformed exercise references are warnings
  (the resolver reports them per reference).
- Workout record (1301): title, type, start, end, completed required;
  type must be a known workout type; start/end must be unix timestamps.
- Collection (30003): d required; malformed content references are warnings.
"""

import logging
import re
import string
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from domain.models.record import RawRecord, all_entries, first_value, has_value
from domain.models.reference import (
    AUTHORITY_LENGTH,
    REFERENCE_DELIMITER,
    REFERENCEABLE_KINDS,
    RecordKind,
)
from domain.models.workout_record import WorkoutType

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.digits + "abcdef")
_KIND_CODES = {str(int(kind)): kind for kind in REFERENCEABLE_KINDS}
_INTEGER = re.compile(r"^\d+$")


@dataclass
class ValidationResult:
    """Outcome of validating a record or a reference."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        """All errors joined into one message, or None."""
        return "; ".join(self.errors) if self.errors else None

    @classmethod
    def from_lists(cls, errors: List[str], warnings: List[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=errors, warnings=warnings)


def is_authority(value: str) -> bool:
    """True if value is a 64-character lowercase hex identity token."""
    return len(value) == AUTHORITY_LENGTH and all(c in _HEX_DIGITS for c in value)


def validate_reference(
    raw: Optional[str], expected_kind: Optional[RecordKind] = None
) -> ValidationResult:
    """
    Check ``kind:authority:identifier`` reference syntax.

    Valid iff there are exactly three parts, the kind is a known
    referenceable kind code, the authority is 64 lowercase hex characters and the
    identifier contains no comma. With ``expected_kind``, a well-formed
    reference of another kind is reported as an error too.
    """
    if not isinstance(raw, str) or not raw:
        return ValidationResult(is_valid=False, errors=["Reference is empty"])

    errors: List[str] = []
    parts = raw.split(REFERENCE_DELIMITER)

    if len(parts) != 3:
        message = (
            f'Invalid reference format: "{raw}". Expected "kind:authority:identifier" '
            f"but got {len(parts)} parts."
        )
        if "," in raw:
            message += " Remove extra comma-separated data."
        return ValidationResult(is_valid=False, errors=[message])

    kind_code, authority, identifier = parts

    if kind_code not in _KIND_CODES:
        expected = ", ".join(sorted(_KIND_CODES))
        errors.append(f'Invalid reference kind: "{kind_code}". Expected one of: {expected}.')
    elif expected_kind is not None and _KIND_CODES[kind_code] is not expected_kind:
        errors.append(
            f'Wrong reference kind: "{kind_code}". Expected {int(expected_kind)}.'
        )

    if not is_authority(authority):
        errors.append(
            f'Invalid authority: "{authority}" ({len(authority)} chars). '
            f"Authorities must be exactly {AUTHORITY_LENGTH} lowercase hex characters."
        )

    if "," in identifier:
        errors.append(
            f'Invalid identifier: "{identifier}". Identifiers cannot contain commas. '
            "This looks like workout parameters mixed into the reference."
        )

    return ValidationResult.from_lists(errors, [])


# =============================================================================
# Per-kind record rules
# =============================================================================


def _require(record: RawRecord, names, errors: List[str], label: str) -> None:
    for name in names:
        if not has_value(record.tags, name):
            errors.append(f"Missing required {name} tag for {label}")


def _check_entry_refs(
    record: RawRecord, entry_name: str, warnings: List[str], expected: Optional[RecordKind] = None
) -> None:
    for entry in all_entries(record.tags, entry_name):
        ref = entry[0] if entry else ""
        result = validate_reference(ref)
        if not result.is_valid:
            warnings.append(f"{entry_name} reference skipped: {result.error}")
        elif expected is not None and not ref.startswith(f"{int(expected)}:"):
            warnings.append(f"{entry_name} reference {ref} is not a kind {int(expected)} reference")


def _validate_exercise(record: RawRecord, errors: List[str], warnings: List[str]) -> None:
    _require(record, ("d", "title", "format", "format_units", "equipment"), errors, "exercise")

    format_entry = next((e for e in all_entries(record.tags, "format")), None)
    units_entry = next((e for e in all_entries(record.tags, "format_units")), None)
    if format_entry and units_entry and len(format_entry) != len(units_entry):
        errors.append(
            f"Format units ({len(units_entry)}) don't match format parameters ({len(format_entry)})"
        )


def _validate_template(record: RawRecord, errors: List[str], warnings: List[str]) -> None:
    _require(record, ("d",), errors, "template")
    if not (has_value(record.tags, "title") or has_value(record.tags, "name")):
        warnings.append("Template has no title")
    if not all_entries(record.tags, "exercise"):
        warnings.append("Template has no exercise entries")
    _check_entry_refs(record, "exercise", warnings, expected=RecordKind.EXERCISE)


def _validate_workout_record(record: RawRecord, errors: List[str], warnings: List[str]) -> None:
    _require(record, ("title", "type", "start", "end", "completed"), errors, "workout record")

    workout_type = first_value(record.tags, "type")
    if workout_type and workout_type not in {t.value for t in WorkoutType}:
        errors.append(
            f"Invalid workout type: {workout_type}. "
            f"Expected one of: {', '.join(t.value for t in WorkoutType)}"
        )

    start = first_value(record.tags, "start")
    end = first_value(record.tags, "end")
    for name, value in (("start", start), ("end", end)):
        if value and not _INTEGER.match(value):
            errors.append(f"Invalid {name} timestamp: {value}. Must be a unix timestamp.")
    if start and end and _INTEGER.match(start) and _INTEGER.match(end) and int(end) < int(start):
        errors.append(f"Workout ends ({end}) before it starts ({start})")

    completed = first_value(record.tags, "completed")
    if completed and completed not in ("true", "false"):
        warnings.append(f"Unexpected completed flag: {completed}")

    _check_entry_refs(record, "exercise", warnings, expected=RecordKind.EXERCISE)
    _check_entry_refs(record, "template", warnings, expected=RecordKind.TEMPLATE)


def _validate_collection(record: RawRecord, errors: List[str], warnings: List[str]) -> None:
    _require(record, ("d",), errors, "collection")
    _check_entry_refs(record, "a", warnings)


_RULES: Dict[RecordKind, Callable[[RawRecord, List[str], List[str]], None]] = {
    RecordKind.EXERCISE: _validate_exercise,
    RecordKind.TEMPLATE: _validate_template,
    RecordKind.WORKOUT_RECORD: _validate_workout_record,
    RecordKind.COLLECTION: _validate_collection,
}


def validate_record(record: RawRecord) -> ValidationResult:
    """
    Validate a raw record against the rules for its kind.

    Args:
        record: Raw record as delivered by the provider

    Returns:
        ValidationResult; unknown kinds are reported as an error.
    """
    errors: List[str] = []
    warnings: List[str] = []

    kind = record.record_kind
    if kind is None:
        errors.append(f"Unsupported record kind: {record.kind}")
        return ValidationResult.from_lists(errors, warnings)

    if not is_authority(record.authority):
        warnings.append(f"Authority is not a {AUTHORITY_LENGTH}-character lowercase hex token")

    _RULES[kind](record, errors, warnings)
    return ValidationResult.from_lists(errors, warnings)
