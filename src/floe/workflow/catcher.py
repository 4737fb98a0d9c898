"""Catch policies for Task, Map and Parallel states."""

from ..errors import InvalidWorkflowError
from .path import ReferencePath
from .retrier import error_matches, parse_error_equals


class Catcher:
    """A single ``Catch`` entry."""

    def __init__(self, payload: dict):
        self.payload = payload
        self.error_equals = parse_error_equals(payload, "Catcher")
        self.next = payload.get("Next")
        if not isinstance(self.next, str):
            raise InvalidWorkflowError(f"Catcher requires Next: {payload}")
        result_path = payload.get("ResultPath", "$")
        self.result_path = ReferencePath(result_path) if result_path is not None else None

    def matches(self, error: Exception) -> bool:
        return error_matches(self.error_equals, error)

    def __repr__(self) -> str:
        return f"Catcher(error_equals={self.error_equals!r}, next={self.next!r})"
