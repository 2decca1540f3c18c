"""
Pure domain services: record validation and parameter interpretation.
"""

from domain.services.parameter_interpreter import (
    PARAMETER_RULES,
    interpret_parameters,
    interpret_template_exercise,
    interpret_value,
    legacy_view,
)
from domain.services.record_validator import (
    ValidationResult,
    is_authority,
    validate_record,
    validate_reference,
)

__all__ = [
    "ValidationResult",
    "validate_record",
    "validate_reference",
    "is_authority",
    "PARAMETER_RULES",
    "interpret_parameters",
    "interpret_template_exercise",
    "interpret_value",
    "legacy_view",
]
