"""Tests for field validator compilation."""

import re
from datetime import date, datetime

import pytest

from perfectschema import MISSING, Any, Integer, Schema, SchemaDefinitionError
from perfectschema.builder import compile_validators, interpret_custom


class TestCompileValidators:
    """Test building validators from raw declarations."""

    @pytest.mark.parametrize("fields", [None, False, "", {}, [], 0])
    def test_no_fields(self, fields):
        """Falsy declarations build no validators."""
        assert compile_validators(fields) == {}

    def test_one_validator_per_field(self):
        """Every declared field gets its own validator, in order."""
        validators = compile_validators({"a": str, "b": float, "c": [bool]})
        assert list(validators) == ["a", "b", "c"]
        assert all(callable(v) for v in validators.values())

    @pytest.mark.parametrize(
        "type_, valid, invalid",
        [
            (bool, True, "true"),
            (str, "abc", 123),
            (dict, {}, []),
            (list, [], "abc"),
            (date, date(2024, 1, 1), "abc"),
            (datetime, datetime(2024, 1, 1, 12), date(2024, 1, 1)),
            (float, 123.456, "abc"),
            (Integer, 123, 123.456),
            ("integer", 123, "123"),
        ],
    )
    def test_primitives(self, type_, valid, invalid):
        """Bare primitive markers check membership only."""
        validator = compile_validators({"foo": type_})["foo"]

        assert validator(valid) is None
        assert validator(invalid) == "invalidType"


class TestPresence:
    """Test required and nullable policies."""

    @pytest.mark.parametrize(
        "required, nullable, absent, null",
        [
            (False, True, None, None),
            (False, False, None, "isNull"),
            (True, True, "required", None),
            (True, False, "required", "isNull"),
        ],
    )
    def test_truth_table(self, required, nullable, absent, null):
        """Presence and nullability are checked independently."""
        validator = compile_validators(
            {"foo": {"type": str, "required": required, "nullable": nullable}}
        )["foo"]

        assert validator() == absent
        assert validator(MISSING) == absent
        assert validator(None) == null
        assert validator("test") is None
        assert validator(123) == "invalidType"

    def test_nullable_defaults_to_true(self):
        """An unset nullable accepts None."""
        validator = compile_validators({"foo": {"type": str, "required": True}})["foo"]
        assert validator(None) is None

    def test_type_check_skipped_for_absent_values(self):
        """Bounds never apply to absent or null values."""
        validator = compile_validators({"foo": {"type": str, "min": 3}})["foo"]
        assert validator() is None
        assert validator(None) is None
        assert validator("ab") == "minString"


class TestBounds:
    """Test min/max bound codes per type."""

    @pytest.mark.parametrize(
        "type_, low, ok, high, codes",
        [
            (str, "a", "abc", "abcdef", ("minString", "maxString")),
            (float, 0.5, 2, 5.5, ("minNumber", "maxNumber")),
            ("integer", 0, 3, 9, ("minInteger", "maxInteger")),
            (
                date,
                date(2023, 12, 31),
                date(2024, 6, 1),
                date(2025, 1, 1),
                ("minDate", "maxDate"),
            ),
        ],
    )
    def test_bounds(self, type_, low, ok, high, codes):
        """Values outside [min, max] report the type's bound codes."""
        bounds = {
            str: (2, 5),
            float: (1, 5),
            "integer": (1, 5),
            date: (date(2024, 1, 1), date(2024, 12, 31)),
        }[type_]
        validator = compile_validators(
            {"foo": {"type": type_, "min": bounds[0], "max": bounds[1]}}
        )["foo"]

        assert validator(low) == codes[0]
        assert validator(ok) is None
        assert validator(high) == codes[1]

    def test_numbers_must_be_finite(self):
        """NaN and infinities are not numbers."""
        validator = compile_validators({"foo": float})["foo"]
        assert validator(float("nan")) == "invalidType"
        assert validator(float("-inf")) == "invalidType"

    def test_huge_integers(self):
        """Integers beyond the float range are finite numbers."""
        validators = compile_validators(
            {"n": float, "i": "integer", "bounded": {"type": float, "max": 1e300}}
        )

        assert validators["n"](10**400) is None
        assert validators["i"](-(10**400)) is None
        assert validators["bounded"](10**400) == "maxNumber"

        context = Schema({"i": "integer"}).create_context()
        assert context.validate({"i": 10**400}) is True

    def test_dates_against_datetime_bounds(self):
        """Dates and datetimes compare with bounds of the other kind."""
        by_date = compile_validators(
            {"d": {"type": date, "min": date(2020, 1, 1), "max": date(2020, 12, 31)}}
        )["d"]
        by_datetime = compile_validators(
            {"d": {"type": date, "min": datetime(2020, 1, 1, 12)}}
        )["d"]
        stamp = compile_validators({"d": {"type": datetime, "max": date(2020, 1, 1)}})["d"]

        assert by_date(datetime(2020, 6, 1, 8)) is None
        assert by_date(datetime(2019, 12, 31, 23)) == "minDate"
        assert by_date(datetime(2021, 1, 1)) == "maxDate"

        assert by_datetime(date(2020, 1, 2)) is None
        assert by_datetime(date(2020, 1, 1)) == "minDate"

        assert stamp(datetime(2020, 1, 1, 18)) is None
        assert stamp(datetime(2020, 1, 2)) == "maxDate"

    def test_booleans_are_not_numbers(self):
        """bool is never accepted where a number is expected."""
        validators = compile_validators({"n": float, "i": Integer})
        assert validators["n"](True) == "invalidType"
        assert validators["i"](False) == "invalidType"

    def test_integral_floats_are_integers(self):
        """Integer accepts floats without a fractional part."""
        validator = compile_validators({"foo": Integer})["foo"]
        assert validator(5.0) is None
        assert validator(5.5) == "invalidType"


class TestAny:
    """Test the wildcard and union types."""

    def test_wildcard(self, invalid_values):
        """Bare Any accepts every value."""
        validator = compile_validators({"foo": Any})["foo"]

        for value in [None, "", "abc", -1, 0, 1, datetime.now()] + invalid_values:
            assert validator(value) is None, value

    def test_wildcard_called_without_types(self):
        """Any() without types is the wildcard itself."""
        assert Any() is Any

    def test_union_of_types(self, invalid_values):
        """Any(...) accepts a value matching at least one candidate."""
        validator = compile_validators(
            {
                "foo": Any(
                    str,
                    {"type": float, "min": 1, "max": 3},
                    {"type": "integer", "min": 5, "max": 10},
                )
            }
        )["foo"]

        for value in ["", "abc", 1, 1.5, 2, 2.5, 3, 5, 6, 7, 8, 9, 10]:
            assert validator(value) is None, value

        for value in [0.5, 3.1, 7.5, 9.99]:
            assert validator(value) is not None, value

        for value in [None, datetime.now()] + invalid_values:
            assert validator(value) == "invalidType", value

    def test_union_reports_bound_code(self):
        """A value of the right type but out of bounds keeps its bound code."""
        validator = compile_validators(
            {"foo": Schema.AnyOf(str, {"type": float, "min": 1, "max": 3})}
        )["foo"]
        assert validator(0.5) == "minNumber"
        assert validator(True) == "invalidType"

    def test_union_with_explicit_nullable(self):
        """An explicitly nullable union field accepts None."""
        validator = compile_validators(
            {"foo": {"type": Schema.AnyOf(str, float), "nullable": True}}
        )["foo"]
        assert validator(None) is None

    def test_nullable_candidate(self):
        """A nullable candidate accepts None on behalf of the union."""
        validator = compile_validators(
            {"foo": Schema.AnyOf(float, {"type": str, "nullable": True})}
        )["foo"]
        assert validator(None) is None

    def test_candidate_custom_rule(self):
        """Candidates run their own custom rule."""
        validator = compile_validators(
            {
                "foo": Schema.AnyOf(
                    {"type": str, "custom": lambda v: v.isupper() or "notUpper"},
                    float,
                )
            }
        )["foo"]
        assert validator("ABC") is None
        assert validator(1.0) is None
        assert validator("abc") == "notUpper"

    def test_candidate_mapping_becomes_schema(self):
        """Plain field mappings are wrapped into anonymous schemas."""
        validator = compile_validators({"foo": Schema.AnyOf(str, {"bar": bool})})["foo"]
        assert validator({"bar": True}) is None
        assert validator({"bar": "no"}) == "invalid"


class TestArrays:
    """Test array shorthand and ArrayOf."""

    def test_shorthand(self):
        """[T] declares an array of T."""
        validator = compile_validators({"foo": [str]})["foo"]

        for value in [[], [""], ["abc"], ["", "abc"], ("a", "b")]:
            assert validator(value) is None, value

        for value in [
            True, False, "", "abc", float("inf"), float("nan"),
            datetime.now(), {}, lambda: None, re.compile("."), [None], ["a", 1],
        ]:
            assert validator(value) == "invalidType", value

    def test_array_options(self):
        """arrayOptions bound the length, min/max bound each element."""
        validator = compile_validators(
            {"foo": {"type": [str], "arrayOptions": {"min": 2}, "min": 3}}
        )["foo"]

        assert validator(["abc", "defg", "hijkl"]) is None

        for value in [[], [""], ["", "", ""], ["abc", "", "def"], "abc", {}]:
            assert validator(value) is not None, value

        assert validator([]) == "minArray"
        assert validator(["abc", "", "def"]) == "invalidType"

    def test_array_max_length(self):
        """array_options.max caps the length."""
        validator = compile_validators(
            {"foo": {"type": Schema.ArrayOf(float), "array_options": {"max": 2}}}
        )["foo"]
        assert validator([1, 2]) is None
        assert validator([1, 2, 3]) == "maxArray"

    def test_nested_arrays(self):
        """Array shorthands nest."""
        validator = compile_validators({"foo": [[float]]})["foo"]
        assert validator([[1.0], [], [2, 3]]) is None
        assert validator([[1.0], ["x"]]) == "invalidType"

    def test_array_of_mapping_becomes_schema(self):
        """ArrayOf wraps a plain field mapping into an anonymous schema."""
        validator = compile_validators({"foo": Schema.ArrayOf({"bar": float})})["foo"]
        assert validator([{"bar": 1.0}, {}]) is None
        assert validator([{"bar": "x"}]) == "invalid"
        assert validator([1]) == "invalidType"

    @pytest.mark.parametrize("type_", [[], [None, None], [str, float]])
    def test_invalid_array_type(self, type_):
        """Array shorthands need exactly one element type."""
        with pytest.raises(SchemaDefinitionError):
            compile_validators({"foo": type_})
        with pytest.raises(SchemaDefinitionError):
            compile_validators({"foo": {"type": type_}})

    @pytest.mark.parametrize("type_", [[[]], [None], None, object(), {"bar": str}])
    def test_invalid_type(self, type_):
        """Unresolvable types fail at build time."""
        with pytest.raises(SchemaDefinitionError):
            compile_validators({"foo": type_})
        with pytest.raises(SchemaDefinitionError):
            compile_validators({"foo": {"type": type_}})


class TestNestedSchema:
    """Test schemas used as field types."""

    def test_schema_as_type(self):
        """A schema validates mapping values of its field."""
        sub = Schema({"bar": {"type": bool, "custom": lambda v: v is True or "failed"}})
        validator = compile_validators({"foo": sub})["foo"]

        assert validator({"bar": True}) is None
        assert validator({"bar": False}) == "invalid"
        assert validator("bar") == "invalidType"

    def test_schema_presence(self):
        """Presence policy applies before the nested schema runs."""
        sub = Schema({"bar": {"type": bool, "required": True}})
        validator = compile_validators({"foo": {"type": sub, "nullable": False}})["foo"]

        assert validator() is None
        assert validator(None) == "isNull"
        assert validator({}) == "invalid"


class TestCustom:
    """Test author-supplied custom rules."""

    def test_custom_rule(self):
        """Custom runs after the type check and returns its code."""
        validator = compile_validators(
            {
                "foo": {
                    "type": str,
                    "custom": lambda v: not isinstance(v, str) or v == "bar" or "invalid",
                }
            }
        )["foo"]

        assert validator("bar") is None
        assert validator("err") == "invalid"
        assert validator(123) == "invalidType"

    def test_custom_not_called_on_type_failure(self):
        """Custom never sees a value that failed the type check."""
        seen = []
        validator = compile_validators(
            {"foo": {"type": str, "custom": lambda v: seen.append(v)}}
        )["foo"]

        validator(123)
        validator(None)
        validator()
        validator("ok")
        assert seen == ["ok"]

    @pytest.mark.parametrize(
        "result, code",
        [(True, None), (1, None), (None, None), ("", None), ("bad", "bad"), (False, "invalid")],
    )
    def test_interpret_custom(self, result, code):
        """Strings are codes, False is invalid, anything else passes."""
        assert interpret_custom(result) == code
