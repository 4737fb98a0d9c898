"""
Choice rules - Boolean expressions evaluated by Choice states.

A rule is either a combinator (And / Or / Not) over child rules,
or a data rule comparing the value at ``Variable`` with an operand.
"""

import operator
import re
from typing import Any

from ..constants import BOOLEAN_RULE_KEYS
from ..errors import InvalidWorkflowError, PathError
from .context import parse_timestamp
from .path import Path

TYPE_TESTS = ("IsNull", "IsPresent", "IsNumeric", "IsString", "IsBoolean", "IsTimestamp")

COMPARATORS = {
    "Equals": operator.eq,
    "LessThan": operator.lt,
    "GreaterThan": operator.gt,
    "LessThanEquals": operator.le,
    "GreaterThanEquals": operator.ge,
}

_COMPARISON_RE = re.compile(
    r"^(?P<type>String|Numeric|Boolean|Timestamp)"
    r"(?P<op>Equals|LessThanEquals|GreaterThanEquals|LessThan|GreaterThan)"
    r"(?P<path>Path)?$"
)

_NON_OPERATOR_KEYS = {"Variable", "Next", "Comment"}


def is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def glob_to_regex(pattern: str) -> re.Pattern:
    """
    Compile a StringMatches pattern.

    ``*`` matches any sequence of characters, ``\\*`` a literal star.
    """
    parts = re.split(r"(?<!\\)\*", pattern)
    return re.compile(".*".join(re.escape(part.replace("\\*", "*")) for part in parts), re.DOTALL)


class ChoiceRule:
    """Base class for choice rules."""

    def __init__(self, payload: dict):
        if not isinstance(payload, dict):
            raise InvalidWorkflowError(f"Invalid choice rule [{payload}]")
        self.payload = payload
        self.next: str | None = payload.get("Next")

    @classmethod
    def build(cls, payload: dict) -> "ChoiceRule":
        """Build a rule tree from its definition."""
        if isinstance(payload, dict) and BOOLEAN_RULE_KEYS & payload.keys():
            return BooleanRule(payload)
        return DataRule(payload)

    def is_true(self, context, input: Any) -> bool:
        raise NotImplementedError


class BooleanRule(ChoiceRule):
    """And / Or / Not combinator."""

    def __init__(self, payload: dict):
        super().__init__(payload)

        keys = BOOLEAN_RULE_KEYS & payload.keys()
        if len(keys) != 1:
            raise InvalidWorkflowError(f"Invalid choice: multiple operators {sorted(keys)}")
        self.operator = keys.pop()

        children = payload[self.operator]
        if self.operator == "Not":
            self.children = [ChoiceRule.build(children)]
        elif isinstance(children, list) and children:
            self.children = [ChoiceRule.build(child) for child in children]
        else:
            raise InvalidWorkflowError(f"Invalid choice: {self.operator} requires a non-empty list")

    def is_true(self, context, input: Any) -> bool:
        if self.operator == "Not":
            return not self.children[0].is_true(context, input)
        if self.operator == "And":
            return all(child.is_true(context, input) for child in self.children)
        return any(child.is_true(context, input) for child in self.children)


class DataRule(ChoiceRule):
    """Comparison of a variable against a literal or a second path."""

    def __init__(self, payload: dict):
        super().__init__(payload)

        if "Variable" not in payload:
            raise InvalidWorkflowError(f"Invalid choice: missing Variable in {payload}")
        self.variable = Path(payload["Variable"])

        keys = [key for key in payload if key not in _NON_OPERATOR_KEYS]
        if len(keys) != 1:
            raise InvalidWorkflowError(f"Invalid choice: expected one comparison in {payload}")
        self.compare_key = keys[0]
        operand = payload[self.compare_key]

        self.value_type: str | None = None
        self.comparator = None
        self.pattern: re.Pattern | None = None

        if self.compare_key in TYPE_TESTS:
            if not isinstance(operand, bool):
                raise InvalidWorkflowError(f"Invalid choice: {self.compare_key} requires a boolean")
            self.operand: Any = operand
        elif self.compare_key == "StringMatches":
            if not isinstance(operand, str):
                raise InvalidWorkflowError("Invalid choice: StringMatches requires a string pattern")
            self.operand = operand
            self.pattern = glob_to_regex(operand)
        else:
            match = _COMPARISON_RE.match(self.compare_key)
            if not match:
                raise InvalidWorkflowError(f"Invalid choice [{self.compare_key}]")
            self.value_type = match.group("type")
            self.comparator = COMPARATORS[match.group("op")]
            self.operand = Path(operand) if match.group("path") else operand

    def is_true(self, context, input: Any) -> bool:
        if self.compare_key == "IsPresent":
            return bool(self.variable.matches(context, input)) == self.operand

        lhs = self.variable.value(context, input)
        if self.compare_key == "IsNull":
            return (lhs is None) == self.operand

        if lhs is None:
            raise PathError(f"No such variable [{self.variable.payload}]")

        if self.compare_key == "IsNumeric":
            return is_numeric(lhs) == self.operand
        if self.compare_key == "IsString":
            return isinstance(lhs, str) == self.operand
        if self.compare_key == "IsBoolean":
            return isinstance(lhs, bool) == self.operand
        if self.compare_key == "IsTimestamp":
            return (parse_timestamp(lhs) is not None) == self.operand

        if self.compare_key == "StringMatches":
            return isinstance(lhs, str) and self.pattern.fullmatch(lhs) is not None

        rhs = self.operand.value(context, input) if isinstance(self.operand, Path) else self.operand
        return self._compare(lhs, rhs)

    def _compare(self, lhs: Any, rhs: Any) -> bool:
        if self.value_type == "Timestamp":
            lhs, rhs = parse_timestamp(lhs), parse_timestamp(rhs)
            if lhs is None or rhs is None:
                return False
        elif self.value_type == "Numeric":
            if not (is_numeric(lhs) and is_numeric(rhs)):
                return False
        elif self.value_type == "String":
            if not (isinstance(lhs, str) and isinstance(rhs, str)):
                return False
        elif not (isinstance(lhs, bool) and isinstance(rhs, bool)):
            return False

        return self.comparator(lhs, rhs)
