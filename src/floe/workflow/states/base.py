"""Base state classes."""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...constants import Status
from ...errors import InvalidWorkflowError, RuntimeStatesError, StatesError
from ..catcher import Catcher
from ..path import Path, ReferencePath
from ..payload_template import PayloadTemplate
from ..retrier import Retrier

if TYPE_CHECKING:
    from ..workflow import Workflow


class State:
    """
    A node of the state graph.

    States are built once from their definition and never change.
    ``run`` receives the driving workflow (for its context, credentials,
    runners and logger) and returns ``(next_state_name, output)``,
    with ``None`` as next state for terminal states.
    """

    # States that may omit both Next and End
    implicit_end = False
    requires_transition = True

    def __init__(self, name: str, payload: dict):
        self.name = name
        self.payload = payload
        self.type: str = payload["Type"]
        self.comment: str | None = payload.get("Comment")
        self.next: str | None = payload.get("Next")
        self.end: bool = self.implicit_end or bool(payload.get("End", False))

        if self.next is not None and not isinstance(self.next, str):
            raise InvalidWorkflowError(f"State [{name}]: Next must be a state name")
        if payload.get("End") and self.next is not None:
            raise InvalidWorkflowError(f"State [{name}] cannot have both Next and End")
        if self.requires_transition and not self.end and self.next is None:
            raise InvalidWorkflowError(f"State [{name}] requires Next or End")

        self.input_path = self._optional_path("InputPath")
        self.output_path = self._optional_path("OutputPath")

    @property
    def status(self) -> str:
        return Status.SUCCESS.value if self.end else Status.RUNNING.value

    def next_states(self) -> list[str]:
        """Names of every state this state can transition to."""
        return [self.next] if self.next else []

    def run(self, workflow: "Workflow", input: Any) -> tuple[str | None, Any]:
        raise NotImplementedError

    def process_input(self, context, input: Any) -> Any:
        return self.input_path.value(context, input) if self.input_path else {}

    def process_output(self, context, output: Any) -> Any:
        return self.output_path.value(context, output) if self.output_path else {}

    def transition(self) -> str | None:
        return None if self.end else self.next

    def _optional_path(self, key: str, path_class: type[Path] = Path, default: str = "$") -> Path | None:
        # An explicit null discards the data instead of selecting it
        value = self.payload.get(key, default)
        return path_class(value) if value is not None else None

    def _optional_template(self, key: str) -> PayloadTemplate | None:
        return PayloadTemplate(self.payload[key]) if key in self.payload else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ResultState(State):
    """A state that produces a result merged back with ResultPath."""

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)
        self.parameters = self._optional_template("Parameters")
        self.result_path = self._optional_path("ResultPath", ReferencePath)

    def apply_result_path(self, input: Any, result: Any) -> Any:
        if self.result_path is None:
            return input
        return self.result_path.set(input, result)


@dataclass
class TaskOutcome:
    """Result of one attempt at running a state: an output or an error."""

    output: Any = None
    error: StatesError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class RetryCatchState(ResultState):
    """
    A state whose failures go through Retry, then Catch, then propagate.

    Subclasses implement ``execute``; every failure it raises, other than
    a definition error, becomes a TaskOutcome error that the Retry/Catch
    scan inspects.
    """

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)
        self.result_selector = self._optional_template("ResultSelector")
        self.retry = [Retrier(retrier) for retrier in payload.get("Retry", [])]
        self.catch = [Catcher(catcher) for catcher in payload.get("Catch", [])]

    def next_states(self) -> list[str]:
        return super().next_states() + [catcher.next for catcher in self.catch]

    def execute(self, workflow: "Workflow", input: Any) -> Any:
        raise NotImplementedError

    def attempt(self, workflow: "Workflow", input: Any) -> TaskOutcome:
        try:
            return TaskOutcome(output=self.execute(workflow, input))
        except InvalidWorkflowError:
            raise
        except StatesError as err:
            return TaskOutcome(error=err)
        except Exception as err:
            error = RuntimeStatesError(str(err) or type(err).__name__)
            error.__cause__ = err
            return TaskOutcome(error=error)

    def run(self, workflow: "Workflow", input: Any) -> tuple[str | None, Any]:
        while True:
            outcome = self.attempt(workflow, input)
            if outcome.success:
                return self.transition(), outcome.output

            if not self.retry_error(workflow, outcome.error):
                break

        error = outcome.error
        catcher = next((catcher for catcher in self.catch if catcher.matches(error)), None)
        if catcher is None:
            workflow.logger.error("State [%s] failed: %s (%s)", self.name, error.error, error.cause)
            raise error

        workflow.logger.warning("State [%s] caught %s, continuing at [%s]", self.name, error.error, catcher.next)
        output = catcher.result_path.set(input, error.to_dict()) if catcher.result_path else input
        return catcher.next, output

    def retry_error(self, workflow: "Workflow", error: StatesError) -> bool:
        """
        Apply the first matching Retrier.

        Returns:
            True after sleeping for the backoff delay, False when no Retrier
            matches or its attempts are exhausted
        """
        index = next((index for index, retrier in enumerate(self.retry) if retrier.matches(error)), None)
        if index is None:
            return False
        retrier = self.retry[index]

        state = workflow.context.state
        if state.get("RetrierIndex") != index:
            state["RetrierIndex"] = index
            state["RetryCount"] = 0

        state["RetryCount"] += 1
        if state["RetryCount"] > retrier.max_attempts:
            return False

        delay = retrier.sleep_duration(state["RetryCount"])
        workflow.logger.info(
            "State [%s] failed with %s, retry %d/%d in %ss",
            self.name,
            error.error,
            state["RetryCount"],
            retrier.max_attempts,
            delay,
        )
        time.sleep(delay)
        return True

    def process_result(self, context, input: Any, result: Any) -> Any:
        """Apply ResultSelector, ResultPath and OutputPath to a raw result."""
        if self.result_selector:
            result = self.result_selector.value(context, result)
        return self.process_output(context, self.apply_result_path(input, result))
