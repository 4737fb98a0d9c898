"""Workflow driver - Steps a state machine over a context."""

import copy
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..constants import Status
from ..errors import StatesError, WorkflowEndedError
from ..runners import RunnerRegistry, default_registry
from .context import Context, format_timestamp, utc_now
from .definition import StateMachine
from .states import State


@dataclass
class WorkflowCallbacks:
    """
    Callbacks for workflow progress reporting.

    Allows the CLI to display progress without coupling the driver to Rich.
    All callbacks are optional - if None, no callback is made.
    """

    on_state_start: Callable[[str, Any], None] | None = None  # name, input
    on_state_complete: Callable[[str, str | None, Any], None] | None = None  # name, next, output
    on_workflow_complete: Callable[[str, Any], None] | None = None  # status, output


class Workflow:
    """
    One run of a state machine.

    The workflow owns its Context exclusively. ``step`` runs the current
    state and advances to the next one; ``run`` steps until the end.
    Passing a Context saved from ``context.to_dict()`` resumes a run.
    """

    def __init__(
        self,
        definition: StateMachine | dict,
        input: Any = None,
        context: Context | dict | None = None,
        credentials: dict | None = None,
        runners: RunnerRegistry | None = None,
        logger: logging.Logger | None = None,
        callbacks: WorkflowCallbacks | None = None,
        name: str | None = None,
    ):
        self.definition = definition if isinstance(definition, StateMachine) else StateMachine(definition, name=name)
        self.context = context if isinstance(context, Context) else Context(context, input=input)
        self.credentials = credentials or {}
        self.logger = logger or logging.getLogger(__name__)
        self.runners = runners if runners is not None else default_registry(logger=self.logger)
        self.callbacks = callbacks or WorkflowCallbacks()

        if self.context.state_name is None:
            self.context.state = {"Name": self.definition.start_at, "Input": self.context.execution["Input"]}
        self.context.state_machine.setdefault("Name", self.definition.name)

        self.current_state: State = self.definition[self.context.state_name]

    @classmethod
    def load(cls, path: Path | str, input: Any = None, **kwargs) -> "Workflow":
        """Load a definition file and create a run for it."""
        return cls(StateMachine.load(path), input=input, **kwargs)

    @property
    def name(self) -> str | None:
        return self.definition.name

    @property
    def status(self) -> str:
        return self.context.status

    @property
    def output(self) -> Any:
        return self.context.output if self.is_end() else None

    @property
    def error(self) -> str | None:
        return self.context.execution.get("Error")

    @property
    def cause(self) -> str | None:
        return self.context.execution.get("Cause")

    def is_end(self) -> bool:
        return self.context.ended()

    def step(self) -> str | None:
        """
        Run the current state once.

        Returns:
            Name of the next state, or None when the run ended

        Raises:
            WorkflowEndedError: If the run already ended
            Exception: Whatever the state raised; the run is marked errored
        """
        if self.is_end():
            raise WorkflowEndedError(f"Workflow already ended with status [{self.status}]")

        context = self.context
        state = self.current_state
        entered = utc_now()

        if not context.started():
            context.execution["StartTime"] = format_timestamp(entered)
            context.status = Status.RUNNING

        input = context.input
        context.state.update({"Guid": str(uuid.uuid4()), "EnteredTime": format_timestamp(entered)})

        self.logger.info("Running state: [%s] with input [%s]", state.name, input)
        if self.callbacks.on_state_start:
            self.callbacks.on_state_start(state.name, input)

        try:
            next_state, output = state.run(self, input)
        except Exception as err:
            self._abort(state, err)
            raise

        finished = utc_now()
        context.state.update(
            {
                "FinishedTime": format_timestamp(finished),
                "Duration": (finished - entered).total_seconds(),
                "Output": output,
            }
        )
        context.states.append(copy.deepcopy(context.state))

        self.logger.info("Running state: [%s] finished, next state: [%s]", state.name, next_state)
        if self.callbacks.on_state_complete:
            self.callbacks.on_state_complete(state.name, next_state, output)

        # A caught error routes an End state to its catcher's Next
        if next_state is None:
            self._finish(state.status, finished)
            return None

        context.state = {"Name": next_state, "Input": output}
        self.current_state = self.definition[next_state]
        return next_state

    def run(self) -> Any:
        """Step until the run ends and return its output."""
        while not self.is_end():
            self.step()
        return self.output

    def fork(self, definition: StateMachine, input: Any, extra: dict | None = None) -> "Workflow":
        """Create a child run for a Map iteration or Parallel branch."""
        return Workflow(
            definition,
            context=self.context.fork(input, extra),
            credentials=self.credentials,
            runners=self.runners,
            logger=self.logger,
        )

    def _finish(self, status: str, finished) -> None:
        self.context.execution["EndTime"] = format_timestamp(finished)
        self.context.status = status
        self.logger.info("Workflow [%s] ended with status [%s]", self.name, status)
        if self.callbacks.on_workflow_complete:
            self.callbacks.on_workflow_complete(status, self.context.output)

    def _abort(self, state: State, err: Exception) -> None:
        execution = self.context.execution
        if isinstance(err, StatesError):
            execution["Error"], execution["Cause"] = err.error, err.cause
        else:
            execution["Error"], execution["Cause"] = type(err).__name__, str(err)
        self.logger.error("Workflow [%s] aborted in state [%s]: %s", self.name, state.name, err)
        self._finish(Status.ERRORED.value, utc_now())

    def __repr__(self) -> str:
        return f"Workflow(name={self.name!r}, state={self.current_state.name!r}, status={self.status!r})"
