"""Payload templates - Reshaping data with embedded path expressions."""

from typing import Any

from ..constants import PATH_KEY_SUFFIX
from ..errors import InvalidWorkflowError
from .path import Path


class PayloadTemplate:
    """
    A nested map/list template whose path leaves are resolved at run time.

    Keys ending in ``.$`` lose the suffix and their value is resolved as a
    Path; string values starting with ``$`` are resolved as well.
    Everything else is copied through unchanged.
    """

    def __init__(self, payload: Any):
        self.payload = payload
        self._template = self._parse(payload)

    def value(self, context, input: Any) -> Any:
        return self._interpolate(self._template, context, input)

    def _parse(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self._parse(item) for item in value]

        if isinstance(value, dict):
            parsed = {}
            for key, item in value.items():
                if key.endswith(PATH_KEY_SUFFIX):
                    if not isinstance(item, str):
                        raise InvalidWorkflowError(f"Payload template key [{key}] must have a path string value")
                    parsed[key[: -len(PATH_KEY_SUFFIX)]] = Path(item)
                else:
                    parsed[key] = self._parse(item)
            return parsed

        if isinstance(value, str) and value.startswith("$"):
            return Path(value)

        return value

    def _interpolate(self, value: Any, context, input: Any) -> Any:
        if isinstance(value, Path):
            return value.value(context, input)
        if isinstance(value, list):
            return [self._interpolate(item, context, input) for item in value]
        if isinstance(value, dict):
            return {key: self._interpolate(item, context, input) for key, item in value.items()}
        return value

    def __repr__(self) -> str:
        return f"PayloadTemplate({self.payload!r})"
