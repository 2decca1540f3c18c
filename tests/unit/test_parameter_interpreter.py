"""
Unit tests for the parameter interpreter.

Raw positional values are interpreted against an exercise's declared
format/format_units schema.
"""

from datetime import datetime, timezone

import pytest

from domain.models import Exercise, TemplateExercise
from domain.models.workout_record import SetType
from domain.services import interpret_parameters, interpret_template_exercise, interpret_value
from tests.fakes import AUTHORITY_A, exercise_ref


def make_exercise(format=("weight", "reps"), format_units=("kg", "count")) -> Exercise:
    return Exercise(
        id="squat",
        name="Back Squat",
        format=list(format),
        format_units=list(format_units),
        equipment="barbell",
        author=AUTHORITY_A,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.mark.unit
class TestInterpretParameters:
    def test_weight_and_reps(self):
        result = interpret_parameters(["100", "8"], make_exercise())

        weight = result.parameters["weight"]
        reps = result.parameters["reps"]
        assert (weight.value, weight.unit, weight.is_valid) == ("100", "kg", True)
        assert (reps.value, reps.unit, reps.is_valid) == ("8", "count", True)
        assert result.errors == []
        assert result.warnings == []
        assert result.is_valid is True

    def test_legacy_view_uses_valid_values(self):
        exercise = make_exercise(
            ("weight", "reps", "rpe", "set_type"), ("kg", "count", "0-10", "enum")
        )
        result = interpret_parameters(["102.5", "5", "8", "Drop"], exercise)

        view = result.legacy_view
        assert view.weight == 102.5
        assert view.reps == 5
        assert view.rpe == 8.0
        assert view.set_type is SetType.DROP

    def test_legacy_view_defaults_for_invalid_or_missing(self):
        exercise = make_exercise(("weight", "reps", "rpe"), ("kg", "count", "0-10"))
        result = interpret_parameters(["-5", "zero", "11"], exercise)

        assert result.is_valid is False
        assert len(result.errors) == 3
        view = result.legacy_view
        assert (view.weight, view.reps, view.rpe, view.set_type) == (0.0, 1, 7.0, SetType.NORMAL)

    def test_missing_schema_is_all_invalid(self):
        result = interpret_parameters(["100", "8"], make_exercise(format=(), format_units=()))

        assert result.parameters == {}
        assert result.is_valid is False
        assert "missing format or format_units" in result.errors[0]

    def test_count_mismatch_warns_and_interprets_prefix(self):
        result = interpret_parameters(["100", "8", "9"], make_exercise())

        assert set(result.parameters) == {"weight", "reps"}
        assert result.is_valid is True
        assert any("Parameter count mismatch" in w for w in result.warnings)

    def test_units_mismatch_warns(self):
        exercise = make_exercise(("weight", "reps"), ("kg",))
        result = interpret_parameters(["100", "8"], exercise)

        assert set(result.parameters) == {"weight"}
        assert any("Format units count mismatch" in w for w in result.warnings)

    def test_template_exercise_uses_planned_parameters(self):
        entry = TemplateExercise(exercise_ref=exercise_ref("squat"), sets=3, parameters=["60", "10"])
        result = interpret_template_exercise(entry, make_exercise())
        assert result.value("weight") == "60"
        assert result.value("reps") == "10"


@pytest.mark.unit
class TestInterpretValue:
    def test_effort_bounds(self):
        assert interpret_value("7", "rpe", "0-10").is_valid is True
        eleven = interpret_value("11", "rpe", "0-10")
        assert eleven.is_valid is False
        assert "between 0-10" in eleven.error

    def test_effort_lower_bound_depends_on_unit(self):
        assert interpret_value("0", "rpe", "0-10").is_valid is True
        assert interpret_value("0", "effort", "1-10").is_valid is False

    def test_reps_must_be_positive_integer(self):
        assert interpret_value("8", "reps", "count").is_valid is True
        assert interpret_value("0", "reps", "count").is_valid is False
        assert interpret_value("8.5", "reps", "reps").is_valid is False

    def test_weight_unit_checked(self):
        result = interpret_value("100", "weight", "stone")
        assert result.is_valid is False
        assert "Invalid weight unit" in result.error

    def test_weight_normalizes_whole_numbers(self):
        assert interpret_value("100.0", "weight", "lbs").value == "100"

    def test_non_finite_numbers_rejected(self):
        assert interpret_value("nan", "weight", "kg").is_valid is False
        assert interpret_value("inf", "distance", "km").is_valid is False

    def test_set_type_case_insensitive(self):
        result = interpret_value("WARMUP", "set_type", "enum")
        assert result.is_valid is True
        assert result.value == "warmup"

    def test_working_set_type_is_normal(self):
        assert interpret_value("working", "set_type", "type").value == "normal"

    def test_unknown_set_type_invalid(self):
        assert interpret_value("superset", "set_type", "enum").is_valid is False

    @pytest.mark.parametrize(
        "name,value,unit",
        [("duration", "90", "seconds"), ("duration", "1.5", "min"), ("distance", "5", "km")],
    )
    def test_duration_and_distance(self, name, value, unit):
        assert interpret_value(value, name, unit).is_valid is True

    def test_unknown_parameter_passes_through(self):
        result = interpret_value("blue", "band_color", "color")
        assert result.is_valid is True
        assert result.value == "blue"
        assert "No validator available" in result.error
