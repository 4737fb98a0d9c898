"""State machine definitions - Parsing and validating workflow documents."""

import json
from pathlib import Path
from typing import Any

import yaml

from ..errors import InvalidWorkflowError
from .states import State, build_state

YAML_SUFFIXES = {".yaml", ".yml"}


class StateMachine:
    """
    A parsed ``{"StartAt": ..., "States": {...}}`` document.

    The definition is read-only once built; the same instance can be
    shared by any number of runs.
    """

    def __init__(self, payload: dict, name: str | None = None):
        if not isinstance(payload, dict):
            raise InvalidWorkflowError("Workflow definition must be an object")

        self.payload = payload
        self.name = name
        self.comment: str | None = payload.get("Comment")
        self.timeout_seconds: float | None = payload.get("TimeoutSeconds")

        self.start_at = payload.get("StartAt")
        if not isinstance(self.start_at, str):
            raise InvalidWorkflowError("Workflow definition requires StartAt")

        states = payload.get("States")
        if not isinstance(states, dict) or not states:
            raise InvalidWorkflowError("Workflow definition requires a non-empty States object")

        self.states: dict[str, State] = {name: build_state(name, spec) for name, spec in states.items()}

        if self.start_at not in self.states:
            raise InvalidWorkflowError(f"StartAt [{self.start_at}] is not a state")
        self._validate_transitions()

    @classmethod
    def from_json(cls, text: str, name: str | None = None) -> "StateMachine":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as err:
            raise InvalidWorkflowError(f"Invalid workflow JSON: {err}") from err
        return cls(payload, name=name)

    @classmethod
    def load(cls, path: Path | str) -> "StateMachine":
        """
        Load a definition from a JSON or YAML file.

        Args:
            path: Definition file; ``.yaml``/``.yml`` files are read as YAML

        Returns:
            Parsed StateMachine named after the file stem
        """
        path = Path(path)
        text = path.read_text()

        if path.suffix.lower() in YAML_SUFFIXES:
            try:
                payload: Any = yaml.safe_load(text)
            except yaml.YAMLError as err:
                raise InvalidWorkflowError(f"Invalid workflow YAML in {path}: {err}") from err
            return cls(payload, name=path.stem)

        return cls.from_json(text, name=path.stem)

    def _validate_transitions(self) -> None:
        for state in self.states.values():
            for target in state.next_states():
                if target not in self.states:
                    raise InvalidWorkflowError(f"State [{state.name}] transitions to unknown state [{target}]")

    def __getitem__(self, name: str) -> State:
        try:
            return self.states[name]
        except KeyError:
            raise InvalidWorkflowError(f"No such state [{name}]") from None

    def __repr__(self) -> str:
        return f"StateMachine(name={self.name!r}, start_at={self.start_at!r}, states={len(self.states)})"
