"""
Parameter interpretation for exercise slots.

Maps raw positional values from a template or workout record onto the
declared schema of the exercise they belong to: ``values[i]`` is named by
``exercise.format[i]`` and measured in ``exercise.format_units[i]``. Each
named parameter is validated by a per-name rule that checks the unit is
allowed and the value is sane.

Count mismatches between values, format and format_units are warnings; the
overlapping prefix is still interpreted.
"""

import logging
import math
from typing import Callable, Dict, Optional, Sequence, Tuple

from domain.models.exercise import Exercise
from domain.models.parameters import (
    InterpretationResult,
    LegacyParameterView,
    ParameterValue,
)
from domain.models.template import TemplateExercise
from domain.models.workout_record import SetType

logger = logging.getLogger(__name__)

# (normalized_value, error)
RuleOutcome = Tuple[Optional[str], Optional[str]]
ParameterRule = Callable[[str, str], RuleOutcome]

WEIGHT_UNITS = ("kg", "lbs", "bodyweight")
REPS_UNITS = ("count", "reps")
EFFORT_UNITS = ("0-10", "rpe", "1-10")
SET_TYPE_UNITS = ("enum", "type")
SET_TYPE_VALUES = ("warmup", "normal", "drop", "failure", "working")
DURATION_UNITS = ("seconds", "minutes", "sec", "min")
DISTANCE_UNITS = ("meters", "km", "miles", "yards", "m")


def _format_number(number: float) -> str:
    return str(int(number)) if number.is_integer() else str(number)


def _unit_error(label: str, unit: str, allowed: Sequence[str]) -> str:
    return f"Invalid {label} unit: {unit}. Expected: {', '.join(allowed)}"


def _number(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _non_negative(label: str, allowed: Sequence[str]) -> ParameterRule:
    def rule(value: str, unit: str) -> RuleOutcome:
        if unit not in allowed:
            return None, _unit_error(label, unit, allowed)
        number = _number(value)
        if number is None:
            return None, f"Invalid {label} value: {value}. Must be a number."
        if number < 0:
            return None, f"Invalid {label} value: {value}. Must be >= 0."
        return _format_number(number), None

    return rule


def _validate_reps(value: str, unit: str) -> RuleOutcome:
    if unit not in REPS_UNITS:
        return None, _unit_error("reps", unit, REPS_UNITS)
    try:
        reps = int(value.strip())
    except ValueError:
        return None, f"Invalid reps value: {value}. Must be a whole number."
    if reps <= 0:
        return None, f"Invalid reps value: {value}. Must be > 0."
    return str(reps), None


def _validate_effort(value: str, unit: str) -> RuleOutcome:
    if unit not in EFFORT_UNITS:
        return None, _unit_error("RPE", unit, EFFORT_UNITS)
    number = _number(value)
    if number is None:
        return None, f"Invalid RPE value: {value}. Must be a number."
    low = 1 if unit == "1-10" else 0
    if not low <= number <= 10:
        return None, f"Invalid RPE value: {value}. Must be between {low}-10."
    return _format_number(number), None


def _validate_set_type(value: str, unit: str) -> RuleOutcome:
    if unit not in SET_TYPE_UNITS:
        return None, _unit_error("set_type", unit, SET_TYPE_UNITS)
    normalized = value.strip().lower()
    if normalized not in SET_TYPE_VALUES:
        return None, f"Invalid set_type value: {value}. Expected: {', '.join(SET_TYPE_VALUES)}"
    return SetType.coerce(normalized).value, None


PARAMETER_RULES: Dict[str, ParameterRule] = {
    "weight": _non_negative("weight", WEIGHT_UNITS),
    "reps": _validate_reps,
    "rpe": _validate_effort,
    "effort": _validate_effort,
    "set_type": _validate_set_type,
    "duration": _non_negative("duration", DURATION_UNITS),
    "distance": _non_negative("distance", DISTANCE_UNITS),
}


def interpret_value(value: str, name: str, unit: str) -> ParameterValue:
    """Validate one slot. Parameters without a rule pass through as valid."""
    rule = PARAMETER_RULES.get(name)
    if rule is None:
        return ParameterValue(
            value=value,
            unit=unit,
            raw=value,
            is_valid=True,
            error=f"No validator available for parameter: {name}",
        )

    normalized, error = rule(value, unit)
    return ParameterValue(
        value=normalized if normalized is not None else value,
        unit=unit,
        raw=value,
        is_valid=error is None,
        error=error,
    )


def legacy_view(parameters: Dict[str, ParameterValue]) -> LegacyParameterView:
    """Scalar weight/reps/rpe/set_type from valid parameters, defaults elsewhere."""

    def valid(*names: str) -> Optional[str]:
        for name in names:
            param = parameters.get(name)
            if param is not None and param.is_valid:
                return param.value
        return None

    defaults = LegacyParameterView()
    weight = _number(valid("weight") or "")
    reps = valid("reps")
    effort = _number(valid("rpe", "effort") or "")
    set_type = valid("set_type")

    return LegacyParameterView(
        weight=weight if weight is not None else defaults.weight,
        reps=int(reps) if reps is not None else defaults.reps,
        rpe=effort if effort is not None else defaults.rpe,
        set_type=SetType.coerce(set_type) if set_type else defaults.set_type,
    )


def interpret_parameters(raw_values: Sequence[str], exercise: Exercise) -> InterpretationResult:
    """
    Interpret raw positional values against an exercise's declared schema.

    Args:
        raw_values: Positional values from a template or workout record entry
        exercise: Exercise whose format/format_units name and type the slots

    Returns:
        InterpretationResult with per-name parameters, a legacy scalar view,
        errors for invalid slots and warnings for count mismatches.
    """
    result = InterpretationResult()

    if not exercise.format or not exercise.format_units:
        message = f"Exercise {exercise.name} missing format or format_units"
        logger.warning(message)
        result.errors.append(message)
        return result

    if len(raw_values) != len(exercise.format):
        result.warnings.append(
            f"Parameter count mismatch: got {len(raw_values)}, expected {len(exercise.format)}"
        )
    if len(exercise.format_units) != len(exercise.format):
        result.warnings.append(
            f"Format units count mismatch: got {len(exercise.format_units)}, "
            f"expected {len(exercise.format)}"
        )

    count = min(len(raw_values), len(exercise.format), len(exercise.format_units))
    for index in range(count):
        name = exercise.format[index]
        param = interpret_value(str(raw_values[index]), name, exercise.format_units[index])
        result.parameters[name] = param
        if not param.is_valid:
            result.errors.append(f"{name}: {param.error}")

    result.legacy_view = legacy_view(result.parameters)
    for warning in result.warnings:
        logger.debug(f"Interpreting {exercise.name}: {warning}")
    return result


def interpret_template_exercise(entry: TemplateExercise, exercise: Exercise) -> InterpretationResult:
    """Interpret a template slot's planned parameters against its exercise."""
    return interpret_parameters(entry.parameters, exercise)
