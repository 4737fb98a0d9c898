"""Path evaluation - Reading and writing data with JSONPath expressions."""

import copy
from typing import Any

from ..constants import INVALID_REFERENCE_PATH_CHARS
from ..errors import InvalidWorkflowError, PathError
from . import jsonpath
from .context import Context


class Path:
    """
    A read-only JSONPath expression.

    ``$$``-prefixed expressions address the context root,
    anything else addresses the state input.
    """

    def __init__(self, payload: str):
        if not isinstance(payload, str) or not payload.startswith("$"):
            raise InvalidWorkflowError(f'Path [{payload}] must start with "$"')

        self.payload = payload
        self.context_path = payload.startswith("$$")
        self.steps = jsonpath.parse(payload[1:] if self.context_path else payload)

    def matches(self, context: Context | dict | None, input: Any) -> list[Any]:
        """Return every value the expression selects."""
        if self.context_path:
            data = context.root if isinstance(context, Context) else (context or {})
        else:
            data = input
        return jsonpath.find(self.steps, data)

    def value(self, context: Context | dict | None, input: Any) -> Any:
        """
        Evaluate the expression.

        Returns:
            None for no match, the value for a single match,
            or the list of values for several matches
        """
        results = self.matches(context, input)
        if not results:
            return None
        if len(results) == 1:
            return results[0]
        return results

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Path) and type(other) is type(self) and other.payload == self.payload

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.payload))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.payload!r})"


class ReferencePath(Path):
    """A Path restricted to plain member and index steps, usable as a write target."""

    def __init__(self, payload: str):
        super().__init__(payload)

        invalid = self.context_path or any(char in payload for char in INVALID_REFERENCE_PATH_CHARS)
        if invalid or any(step.kind not in (jsonpath.KEY, jsonpath.INDEX) for step in self.steps):
            raise InvalidWorkflowError(f"Invalid Reference Path [{payload}]")

        self.path = [step.value for step in self.steps]

    def get(self, data: Any) -> Any:
        return self.value(None, data)

    def set(self, data: Any, value: Any) -> Any:
        """
        Store a value at this path.

        The root path shallow-merges a mapping value into a copy of a
        mapping target; nested paths create missing containers.
        ``data`` itself is never modified.

        Args:
            data: Target document
            value: Value to store

        Returns:
            New document with the value stored
        """
        if not self.path:
            if isinstance(data, dict) and isinstance(value, dict):
                return {**data, **value}
            return value

        result = copy.deepcopy(data) if isinstance(data, (dict, list)) else {}
        node = result
        for step, next_step in zip(self.path[:-1], self.path[1:]):
            child = self._child(node, step)
            if not isinstance(child, (dict, list)):
                child = [] if isinstance(next_step, int) else {}
                self._store(node, step, child)
            node = child

        self._store(node, self.path[-1], value)
        return result

    def _child(self, node: dict | list, step: str | int) -> Any:
        if isinstance(step, int):
            if isinstance(node, list) and -len(node) <= step < len(node):
                return node[step]
            return None
        return node.get(step) if isinstance(node, dict) else None

    def _store(self, node: dict | list, step: str | int, value: Any) -> None:
        if isinstance(step, int):
            if not isinstance(node, list):
                raise PathError(f"Reference Path [{self.payload}]: cannot index into {type(node).__name__}")
            if step < 0:
                if step < -len(node):
                    raise PathError(f"Reference Path [{self.payload}]: index {step} out of range")
            else:
                node.extend([None] * (step + 1 - len(node)))
            node[step] = value
        else:
            if not isinstance(node, dict):
                raise PathError(f"Reference Path [{self.payload}]: cannot set key on {type(node).__name__}")
            node[step] = value
