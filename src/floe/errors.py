"""Exception hierarchy for floe."""

from .constants import ErrorName


class FloeError(Exception):
    """Base class for all floe errors."""


class InvalidWorkflowError(FloeError):
    """The workflow definition is malformed or cannot be interpreted."""


class PathError(FloeError):
    """A path referenced data that is not present in the input."""


class WorkflowEndedError(FloeError):
    """A step was requested on a workflow that already finished."""


class StatesError(FloeError):
    """
    An error raised while executing a state, eligible for Retry/Catch.

    ``error`` is the name matched against ``ErrorEquals``; ``cause``
    is a human-readable description.
    """

    error_name = ErrorName.RUNTIME.value

    def __init__(self, cause: str = "", error: str | None = None):
        self.error = error or self.error_name
        self.cause = cause
        super().__init__(cause or self.error)

    def to_dict(self) -> dict:
        return {"Error": self.error, "Cause": self.cause}


class TaskFailedError(StatesError):
    """A runner finished with a non-zero exit status."""

    error_name = ErrorName.TASK_FAILED.value

    def __init__(self, cause: str = "", exit_status: int | None = None, output: str = ""):
        super().__init__(cause)
        self.exit_status = exit_status
        self.output = output


class StatesTimeoutError(StatesError):
    """A runner exceeded the state's ``TimeoutSeconds``."""

    error_name = ErrorName.TIMEOUT.value


class RuntimeStatesError(StatesError):
    """Any other failure while running a state."""

    error_name = ErrorName.RUNTIME.value


class BranchFailedError(StatesError):
    """A Map iteration or Parallel branch ended in failure."""

    error_name = ErrorName.BRANCH_FAILED.value
