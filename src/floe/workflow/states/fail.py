"""Fail state - Ends the run with an error."""

from typing import Any

from ...constants import Status
from .base import State


class Fail(State):
    """Terminal state carrying an ``Error`` name and a ``Cause`` for diagnostics."""

    implicit_end = True
    requires_transition = False

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)
        self.error: str | None = payload.get("Error")
        self.cause: str | None = payload.get("Cause")

    @property
    def status(self) -> str:
        return Status.ERRORED.value

    def run(self, workflow, input: Any) -> tuple[str | None, Any]:
        execution = workflow.context.execution
        if self.error is not None:
            execution["Error"] = self.error
        if self.cause is not None:
            execution["Cause"] = self.cause
        return None, input
