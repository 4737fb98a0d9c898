"""
JSONPath subset - Parsing and evaluation of query expressions.

Supported syntax:
- ``$`` root, ``.name`` and ``['name']`` member access
- ``[n]`` array index (negative counts from the end)
- ``[*]`` / ``.*`` wildcard, ``..name`` / ``..*`` recursive descent
- ``[a,b]`` unions, ``[start:end:step]`` slices
- ``[?(@.key)]`` and ``[?(@.key <op> literal)]`` filters
"""

import json
import operator
import re
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidWorkflowError

KEY = "key"
INDEX = "index"
WILDCARD = "wildcard"
DESCEND = "descend"
UNION = "union"
SLICE = "slice"
FILTER = "filter"

FILTER_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<=": operator.le,
    ">=": operator.ge,
    "<": operator.lt,
    ">": operator.gt,
}

_FILTER_RE = re.compile(r"^@((?:\.[^.\s<>=!]+)*)\s*(?:(==|!=|<=|>=|<|>)\s*(.+))?$")


@dataclass(frozen=True)
class Step:
    """A single selector of a parsed expression."""

    kind: str
    value: Any = None


def parse(expression: str) -> list[Step]:
    """
    Parse a JSONPath expression into a list of steps.

    Args:
        expression: Expression starting with ``$``

    Returns:
        Steps to apply, in order, starting at the root

    Raises:
        InvalidWorkflowError: If the expression is not valid
    """
    if not isinstance(expression, str) or not expression.startswith("$"):
        raise InvalidWorkflowError(f'Path [{expression}] must start with "$"')

    steps: list[Step] = []
    pos = 1
    length = len(expression)

    while pos < length:
        if expression.startswith("..", pos):
            pos += 2
            if pos < length and expression[pos] == "*":
                steps.append(Step(DESCEND))
                pos += 1
            else:
                name, pos = _read_name(expression, pos)
                steps.append(Step(DESCEND, name))
        elif expression[pos] == ".":
            pos += 1
            if pos < length and expression[pos] == "*":
                steps.append(Step(WILDCARD))
                pos += 1
            else:
                name, pos = _read_name(expression, pos)
                steps.append(Step(KEY, name))
        elif expression[pos] == "[":
            end = _find_closing_bracket(expression, pos)
            steps.append(_parse_bracket(expression, expression[pos + 1 : end].strip()))
            pos = end + 1
        else:
            raise InvalidWorkflowError(f"Invalid path [{expression}]: unexpected {expression[pos]!r} at {pos}")

    return steps


def find(steps: list[Step], data: Any) -> list[Any]:
    """Apply parsed steps to data and return every match."""
    matches = [data]
    for step in steps:
        matches = [found for node in matches for found in _apply(step, node)]
    return matches


def _read_name(expression: str, pos: int) -> tuple[str, int]:
    start = pos
    while pos < len(expression) and expression[pos] not in ".[":
        pos += 1
    if pos == start:
        raise InvalidWorkflowError(f"Invalid path [{expression}]: empty member name at {start}")
    return expression[start:pos], pos


def _find_closing_bracket(expression: str, start: int) -> int:
    quote = None
    for pos in range(start + 1, len(expression)):
        char = expression[pos]
        if quote:
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "]":
            return pos
    raise InvalidWorkflowError(f"Invalid path [{expression}]: unterminated '['")


def _split_outside_quotes(content: str, separator: str) -> list[str]:
    parts = []
    quote = None
    current = ""
    for char in content:
        if quote:
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == separator:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    parts.append(current.strip())
    return parts


def _parse_selector(expression: str, selector: str) -> Step:
    if len(selector) >= 2 and selector[0] == selector[-1] and selector[0] in "'\"":
        return Step(KEY, selector[1:-1])
    try:
        return Step(INDEX, int(selector))
    except ValueError:
        raise InvalidWorkflowError(f"Invalid path [{expression}]: bad selector [{selector}]") from None


def _parse_bracket(expression: str, content: str) -> Step:
    if content == "*":
        return Step(WILDCARD)

    if content.startswith("?(") and content.endswith(")"):
        return _parse_filter(expression, content[2:-1].strip())

    if len(_split_outside_quotes(content, ":")) > 1:
        parts = _split_outside_quotes(content, ":")
        if len(parts) > 3:
            raise InvalidWorkflowError(f"Invalid path [{expression}]: bad slice [{content}]")
        try:
            bounds = [int(part) if part else None for part in parts]
        except ValueError:
            raise InvalidWorkflowError(f"Invalid path [{expression}]: bad slice [{content}]") from None
        return Step(SLICE, slice(*bounds))

    selectors = _split_outside_quotes(content, ",")
    if len(selectors) == 1:
        return _parse_selector(expression, selectors[0])
    return Step(UNION, tuple(_parse_selector(expression, s) for s in selectors))


def _parse_filter(expression: str, content: str) -> Step:
    match = _FILTER_RE.match(content)
    if not match:
        raise InvalidWorkflowError(f"Invalid path [{expression}]: unsupported filter [{content}]")

    keys = tuple(key for key in match.group(1).split(".") if key)
    op = match.group(2)
    literal = None
    if op:
        raw = match.group(3).strip()
        if len(raw) >= 2 and raw[0] == raw[-1] == "'":
            raw = json.dumps(raw[1:-1])
        try:
            literal = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidWorkflowError(f"Invalid path [{expression}]: bad filter literal [{raw}]") from None

    return Step(FILTER, (keys, op, literal))


def _children(node: Any) -> list[Any]:
    if isinstance(node, list):
        return list(node)
    if isinstance(node, dict):
        return list(node.values())
    return []


def _select(step: Step, node: Any) -> list[Any]:
    if step.kind == KEY:
        if isinstance(node, dict) and step.value in node:
            return [node[step.value]]
        return []
    if isinstance(node, list) and -len(node) <= step.value < len(node):
        return [node[step.value]]
    return []


def _descendants(node: Any):
    yield node
    for child in _children(node):
        yield from _descendants(child)


def _filter_matches(node: Any, keys: tuple, op: str | None, literal: Any) -> bool:
    value = node
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            return False
        value = value[key]

    if op is None:
        return True

    try:
        return bool(FILTER_OPERATORS[op](value, literal))
    except TypeError:
        return False


def _apply(step: Step, node: Any) -> list[Any]:
    if step.kind in (KEY, INDEX):
        return _select(step, node)

    if step.kind == WILDCARD:
        return _children(node)

    if step.kind == UNION:
        return [found for selector in step.value for found in _select(selector, node)]

    if step.kind == SLICE:
        return node[step.value] if isinstance(node, list) else []

    if step.kind == DESCEND:
        if step.value is None:
            return [child for descendant in _descendants(node) for child in _children(descendant)]
        return [
            descendant[step.value]
            for descendant in _descendants(node)
            if isinstance(descendant, dict) and step.value in descendant
        ]

    keys, op, literal = step.value
    return [child for child in _children(node) if _filter_matches(child, keys, op, literal)]
