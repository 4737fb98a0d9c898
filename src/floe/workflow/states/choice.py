"""Choice state - Branches on the first matching rule."""

from typing import Any

from ...errors import InvalidWorkflowError
from ..choice_rule import ChoiceRule
from .base import State


class Choice(State):
    """
    Evaluate ``Choices`` in declaration order and follow the first match.

    Falls back to ``Default``; no match and no Default is a definition error.
    """

    requires_transition = False

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)

        choices = payload.get("Choices")
        if not isinstance(choices, list) or not choices:
            raise InvalidWorkflowError(f"State [{name}] requires a non-empty Choices list")

        self.choices = [ChoiceRule.build(choice) for choice in choices]
        for rule in self.choices:
            if rule.next is None:
                raise InvalidWorkflowError(f"State [{name}]: every choice requires Next")

        self.default: str | None = payload.get("Default")
        # Choice never ends a run
        self.end = False

    def next_states(self) -> list[str]:
        names = [rule.next for rule in self.choices]
        if self.default:
            names.append(self.default)
        return names

    def run(self, workflow, input: Any) -> tuple[str | None, Any]:
        context = workflow.context
        input = self.process_input(context, input)

        next_state = next((rule.next for rule in self.choices if rule.is_true(context, input)), self.default)
        if next_state is None:
            raise InvalidWorkflowError(f"State [{self.name}]: no choice matched and no Default")

        return next_state, self.process_output(context, input)
