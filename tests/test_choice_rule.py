"""Tests for choice rules."""

import pytest

from floe.errors import InvalidWorkflowError, PathError
from floe.workflow import BooleanRule, ChoiceRule, DataRule
from floe.workflow.choice_rule import glob_to_regex, is_numeric


def evaluate(payload, input, context=None):
    return ChoiceRule.build({**payload, "Next": "Next"}).is_true(context or {}, input)


class TestBuild:
    """Tests for building rule trees."""

    def test_builds_data_rule(self):
        """Test a comparison builds a DataRule."""
        rule = ChoiceRule.build({"Variable": "$.a", "NumericEquals": 1, "Next": "X"})

        assert isinstance(rule, DataRule)
        assert rule.next == "X"
        assert rule.compare_key == "NumericEquals"
        assert rule.value_type == "Numeric"

    def test_builds_boolean_rule(self):
        """Test And builds a BooleanRule with children."""
        rule = ChoiceRule.build(
            {"And": [{"Variable": "$.a", "IsPresent": True}, {"Variable": "$.b", "IsNull": False}], "Next": "X"}
        )

        assert isinstance(rule, BooleanRule)
        assert rule.operator == "And"
        assert len(rule.children) == 2

    def test_unknown_operator(self):
        """Test an unknown comparison key is rejected at build time."""
        with pytest.raises(InvalidWorkflowError):
            ChoiceRule.build({"Variable": "$.a", "NumericRoughly": 1})

    def test_missing_variable(self):
        """Test a data rule needs a Variable."""
        with pytest.raises(InvalidWorkflowError):
            ChoiceRule.build({"NumericEquals": 1})

    def test_several_comparisons(self):
        """Test a data rule holds exactly one comparison."""
        with pytest.raises(InvalidWorkflowError):
            ChoiceRule.build({"Variable": "$.a", "NumericEquals": 1, "StringEquals": "1"})

    def test_empty_and(self):
        """Test And and Or need a non-empty list."""
        with pytest.raises(InvalidWorkflowError):
            ChoiceRule.build({"And": []})

    def test_type_test_requires_boolean(self):
        """Test type tests take a boolean operand."""
        with pytest.raises(InvalidWorkflowError):
            ChoiceRule.build({"Variable": "$.a", "IsNull": "yes"})

    def test_path_operand_compiled(self):
        """Test ...Path comparisons compile their operand to a Path."""
        rule = ChoiceRule.build({"Variable": "$.a", "NumericLessThanPath": "$.b"})

        assert rule.operand.payload == "$.b"


class TestComparisons:
    """Tests for evaluating data rules."""

    @pytest.mark.parametrize(
        "key,operand,value,expected",
        [
            ("NumericEquals", 1, 1, True),
            ("NumericEquals", 1, 2, False),
            ("NumericLessThan", 5, 3, True),
            ("NumericGreaterThan", 5, 3, False),
            ("NumericLessThanEquals", 3, 3, True),
            ("NumericGreaterThanEquals", 3, 2.5, False),
            ("StringEquals", "a", "a", True),
            ("StringLessThan", "b", "a", True),
            ("StringGreaterThanEquals", "b", "a", False),
            ("BooleanEquals", True, True, True),
            ("BooleanEquals", False, True, False),
            ("TimestampEquals", "2024-01-01T00:00:00Z", "2024-01-01T00:00:00.000Z", True),
            ("TimestampLessThan", "2024-01-02T00:00:00Z", "2024-01-01T23:00:00-02:00", False),
            ("TimestampGreaterThan", "2024-01-01T00:00:00Z", "2024-01-01T00:00:01Z", True),
        ],
    )
    def test_comparison(self, key, operand, value, expected):
        """Test typed comparisons of the variable against a literal."""
        assert evaluate({"Variable": "$.v", key: operand}, {"v": value}) is expected

    @pytest.mark.parametrize(
        "key,operand,value",
        [
            ("NumericEquals", 1, "1"),
            ("NumericEquals", 1, True),
            ("StringEquals", "1", 1),
            ("BooleanEquals", True, 1),
            ("TimestampEquals", "2024-01-01T00:00:00Z", "yesterday"),
        ],
    )
    def test_type_mismatch_is_false(self, key, operand, value):
        """Test a value of the wrong type never matches."""
        assert evaluate({"Variable": "$.v", key: operand}, {"v": value}) is False

    def test_path_comparison(self):
        """Test ...Path variants compare two input values."""
        rule = {"Variable": "$.a", "NumericGreaterThanPath": "$.b"}

        assert evaluate(rule, {"a": 2, "b": 1}) is True
        assert evaluate(rule, {"a": 1, "b": 2}) is False

    def test_context_variable(self):
        """Test variables may address the context."""
        context = {"Execution": {"Input": {"mode": "fast"}}}
        assert evaluate({"Variable": "$$.Execution.Input.mode", "StringEquals": "fast"}, {}, context) is True

    def test_missing_variable_raises(self):
        """Test comparing a missing variable is an error."""
        with pytest.raises(PathError):
            evaluate({"Variable": "$.missing", "NumericEquals": 1}, {})


class TestTypeTests:
    """Tests for Is* type tests."""

    def test_is_present(self):
        """Test IsPresent distinguishes missing from present."""
        assert evaluate({"Variable": "$.a", "IsPresent": True}, {"a": None}) is True
        assert evaluate({"Variable": "$.a", "IsPresent": True}, {}) is False
        assert evaluate({"Variable": "$.a", "IsPresent": False}, {}) is True

    def test_is_null(self):
        """Test IsNull treats missing and null alike."""
        assert evaluate({"Variable": "$.a", "IsNull": True}, {"a": None}) is True
        assert evaluate({"Variable": "$.a", "IsNull": True}, {}) is True
        assert evaluate({"Variable": "$.a", "IsNull": False}, {"a": 0}) is True

    def test_is_numeric(self):
        """Test IsNumeric excludes booleans."""
        assert evaluate({"Variable": "$.a", "IsNumeric": True}, {"a": 1.5}) is True
        assert evaluate({"Variable": "$.a", "IsNumeric": True}, {"a": True}) is False

    def test_is_string_and_boolean(self):
        """Test IsString and IsBoolean."""
        assert evaluate({"Variable": "$.a", "IsString": True}, {"a": "x"}) is True
        assert evaluate({"Variable": "$.a", "IsBoolean": False}, {"a": "x"}) is True

    def test_is_timestamp(self):
        """Test IsTimestamp checks RFC3339 strings."""
        assert evaluate({"Variable": "$.a", "IsTimestamp": True}, {"a": "2024-05-01T10:00:00.5+02:00"}) is True
        assert evaluate({"Variable": "$.a", "IsTimestamp": True}, {"a": "2024-05-01"}) is False

    def test_type_test_on_missing_variable_raises(self):
        """Test type tests other than IsNull and IsPresent need the variable."""
        with pytest.raises(PathError):
            evaluate({"Variable": "$.a", "IsString": True}, {})


class TestStringMatches:
    """Tests for glob matching."""

    @pytest.mark.parametrize(
        "pattern,value,expected",
        [
            ("log-*.txt", "log-2024.txt", True),
            ("log-*.txt", "log-2024.csv", False),
            ("*", "", True),
            ("a*b*c", "aXXbYc", True),
            ("a.c", "abc", False),
            ("star\\*", "star*", True),
            ("star\\*", "starX", False),
        ],
    )
    def test_matches(self, pattern, value, expected):
        """Test * wildcards and escaped stars."""
        assert evaluate({"Variable": "$.v", "StringMatches": pattern}, {"v": value}) is expected

    def test_non_string_value(self):
        """Test non-string values never match."""
        assert evaluate({"Variable": "$.v", "StringMatches": "*"}, {"v": 1}) is False

    def test_glob_to_regex_escapes(self):
        """Test regex metacharacters are literal."""
        assert glob_to_regex("(a)+").fullmatch("(a)+")


class TestBooleanRules:
    """Tests for And / Or / Not."""

    def test_and(self):
        """Test And requires every child."""
        rule = {"And": [{"Variable": "$.a", "NumericGreaterThan": 0}, {"Variable": "$.a", "NumericLessThan": 10}]}

        assert evaluate(rule, {"a": 5}) is True
        assert evaluate(rule, {"a": 15}) is False

    def test_or(self):
        """Test Or requires any child."""
        rule = {"Or": [{"Variable": "$.a", "StringEquals": "x"}, {"Variable": "$.a", "StringEquals": "y"}]}

        assert evaluate(rule, {"a": "y"}) is True
        assert evaluate(rule, {"a": "z"}) is False

    def test_not(self):
        """Test Not negates its single child."""
        assert evaluate({"Not": {"Variable": "$.a", "BooleanEquals": True}}, {"a": False}) is True

    def test_and_short_circuits(self):
        """Test And stops at the first false child."""
        rule = {"And": [{"Variable": "$.a", "IsPresent": True}, {"Variable": "$.a", "NumericEquals": 1}]}

        assert evaluate(rule, {}) is False


def test_is_numeric():
    """Test numeric detection excludes booleans."""
    assert is_numeric(1)
    assert is_numeric(2.5)
    assert not is_numeric(True)
    assert not is_numeric("1")
