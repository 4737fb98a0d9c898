"""Parallel state - Runs every branch on the same input."""

from typing import Any

from ...constants import Status
from ...errors import BranchFailedError, InvalidWorkflowError
from .base import RetryCatchState


def raise_for_branch(child, label: str) -> None:
    """Turn a branch that ended in a Fail state into a BranchFailedError."""
    if child.status != Status.ERRORED.value:
        return
    execution = child.context.execution
    raise BranchFailedError(
        execution.get("Cause") or f"{label} failed",
        error=execution.get("Error"),
    )


class Parallel(RetryCatchState):
    """
    Run each of ``Branches`` to completion, one after another.

    Every branch gets the state input in a forked context; the result is
    the list of branch outputs, in branch order.
    """

    def __init__(self, name: str, payload: dict):
        from ..definition import StateMachine

        super().__init__(name, payload)

        branches = payload.get("Branches")
        if not isinstance(branches, list) or not branches:
            raise InvalidWorkflowError(f"State [{name}] requires a non-empty Branches list")

        self.branches = [
            StateMachine(branch, name=f"{name}.Branches[{index}]") for index, branch in enumerate(branches)
        ]

    def execute(self, workflow, input: Any) -> Any:
        context = workflow.context
        input = self.process_input(context, input)
        branch_input = self.parameters.value(context, input) if self.parameters else input

        results = []
        for index, branch in enumerate(self.branches):
            child = workflow.fork(branch, branch_input)
            child.run()
            raise_for_branch(child, f"{self.name} branch {index}")
            results.append(child.output)

        return self.process_result(context, input, results)
