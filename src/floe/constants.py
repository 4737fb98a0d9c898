"""
Centralized constants for floe.

State type tags, error names and status values are defined here
to avoid duplication across modules.
"""

from enum import Enum


class StateType(str, Enum):
    """Discriminant of a state definition's ``Type`` field."""

    PASS = "Pass"
    TASK = "Task"
    CHOICE = "Choice"
    WAIT = "Wait"
    SUCCEED = "Succeed"
    FAIL = "Fail"
    MAP = "Map"
    PARALLEL = "Parallel"


class ErrorName(str, Enum):
    """Predefined error names usable in ``ErrorEquals``."""

    ALL = "States.ALL"
    TASK_FAILED = "States.TaskFailed"
    TIMEOUT = "States.Timeout"
    RUNTIME = "States.Runtime"
    BRANCH_FAILED = "States.BranchFailed"


class Status(str, Enum):
    """Status of a workflow run or of a single state."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    ERRORED = "errored"


# Keys that turn a choice rule node into a boolean combinator
BOOLEAN_RULE_KEYS = {"And", "Or", "Not"}

# Characters a ReferencePath may not contain
INVALID_REFERENCE_PATH_CHARS = {"@", ",", ":", "?"}

# Suffix marking a payload template key whose value is a path
PATH_KEY_SUFFIX = ".$"

# Retrier defaults
DEFAULT_INTERVAL_SECONDS = 1
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_RATE = 2.0

# Container runners that can serve the docker:// scheme
DOCKER_RUNNERS = ("docker", "podman", "kubernetes")

# Where a container finds its credentials file
SECRETS_MOUNT_PATH = "/run/secrets"
SECRETS_ENV_VAR = "_CREDENTIALS"
