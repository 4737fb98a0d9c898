"""
States layer - One class per state ``Type``.

States are DATA built once from the workflow definition.
They do not hold run state - the workflow's Context does.
"""

from ...constants import StateType
from ...errors import InvalidWorkflowError
from .base import ResultState, RetryCatchState, State, TaskOutcome
from .choice import Choice
from .fail import Fail
from .map_state import Map
from .parallel import Parallel
from .pass_state import Pass
from .succeed import Succeed
from .task import Task
from .wait import Wait

STATE_CLASSES: dict[StateType, type[State]] = {
    StateType.PASS: Pass,
    StateType.TASK: Task,
    StateType.CHOICE: Choice,
    StateType.WAIT: Wait,
    StateType.SUCCEED: Succeed,
    StateType.FAIL: Fail,
    StateType.MAP: Map,
    StateType.PARALLEL: Parallel,
}


def build_state(name: str, payload: dict) -> State:
    """
    Create a state from its definition.

    Raises:
        InvalidWorkflowError: If the definition has no known ``Type``
    """
    if not isinstance(payload, dict) or "Type" not in payload:
        raise InvalidWorkflowError(f"State [{name}] requires a Type")

    try:
        state_type = StateType(payload["Type"])
    except ValueError:
        raise InvalidWorkflowError(f"State [{name}] has invalid Type [{payload['Type']}]") from None

    return STATE_CLASSES[state_type](name, payload)


__all__ = [
    "STATE_CLASSES",
    "build_state",
    "State",
    "ResultState",
    "RetryCatchState",
    "TaskOutcome",
    "Pass",
    "Task",
    "Choice",
    "Wait",
    "Succeed",
    "Fail",
    "Map",
    "Parallel",
]
