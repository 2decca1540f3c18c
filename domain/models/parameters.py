"""
Value objects produced by parameter interpretation.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.models.workout_record import SetType


class ParameterValue(BaseModel):
    """One interpreted parameter slot."""

    value: str = Field(..., description="Normalized value (raw value when invalid)")
    unit: str = Field(..., description="Declared unit for the slot")
    raw: str = Field(..., description="Value exactly as found in the record")
    is_valid: bool = Field(...)
    error: Optional[str] = Field(default=None)

    model_config = {"frozen": True}


class LegacyParameterView(BaseModel):
    """
    Best-effort scalar view for callers that do not need full parameter fidelity.

    Defaults: weight 0, reps 1, rpe 7, set type normal.
    """

    weight: float = Field(default=0.0)
    reps: int = Field(default=1)
    rpe: float = Field(default=7.0)
    set_type: SetType = Field(default=SetType.NORMAL)

    model_config = {"frozen": True}


@dataclass
class InterpretationResult:
    """Result of interpreting raw positional values against an exercise schema."""

    parameters: Dict[str, ParameterValue] = field(default_factory=dict)
    legacy_view: LegacyParameterView = field(default_factory=LegacyParameterView)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def value(self, name: str) -> Optional[str]:
        """Normalized value of a valid parameter, or None."""
        param = self.parameters.get(name)
        if param is None or not param.is_valid:
            return None
        return param.value
