"""
floe - Declarative state-machine workflow interpreter

Runs Amazon States Language style workflows:
- Task, Choice, Pass, Wait, Succeed, Fail, Map and Parallel states
- JSONPath projection of state input and output
- Retry with backoff and Catch routing for failing tasks
- Pluggable container runners (docker, podman, kubernetes)
"""

__version__ = "0.1.0"
__package_name__ = "floe"

from .errors import FloeError, InvalidWorkflowError, StatesError
from .workflow import Context, Workflow

__all__ = [
    "Context",
    "FloeError",
    "InvalidWorkflowError",
    "StatesError",
    "Workflow",
]
